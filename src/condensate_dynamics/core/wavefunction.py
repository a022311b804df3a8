"""
Wavefunction containers for scalar and spin-1 condensates.

Each container owns a position space buffer, a Fourier space buffer and the
FFT plans bound to them. The two buffers are only guaranteed to describe the
same state directly after a transform call; the split-step functions mutate
one side and transform to the other.
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from .diagnostics import (
    calculate_atom_num,
    calculate_component_atom_num,
    density,
    spin_vector,
)
from .grid import Grid
from .transforms import create_fft_plans


class _WavefunctionBase:
    """Buffer and transform machinery shared by all wavefunction types."""

    n_components: int = 1

    def __init__(self, grid: Grid, *, workers: int = -1):
        if not isinstance(grid, Grid):
            raise TypeError("grid must be a Grid instance")
        self.grid = grid
        self.workers = workers

        buffer_shape = (self.n_components,) + grid.shape
        self._data = np.zeros(buffer_shape, dtype=np.complex128)
        self._fourier_data = np.zeros(buffer_shape, dtype=np.complex128)
        self.atom_number = 0.0

        self._create_fft_plans()

    # ------------------------------------------------------------------
    # FFT plans
    # ------------------------------------------------------------------
    def _create_fft_plans(self) -> None:
        spatial_axes = tuple(range(1, self.grid.ndim + 1))
        self._plan_forward, self._plan_backward = create_fft_plans(
            self._data, self._fourier_data, axes=spatial_axes, workers=self.workers
        )

    def rebuild_plans(self) -> None:
        """Rebind the FFT plans if either buffer has been reallocated."""
        if not self._plan_forward.is_bound_to(self._data, self._fourier_data):
            self._create_fft_plans()

    def transform_forward(self) -> None:
        """Position space -> Fourier space, unnormalised."""
        self._plan_forward.execute()

    def transform_backward(self) -> None:
        """Fourier space -> position space, divided by the number of grid points."""
        self._plan_backward.execute()
        self._data /= self.grid.total_points

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    def _checked(self, values, name: str = "state") -> np.ndarray:
        arr = np.asarray(values)
        if arr.size != self.grid.total_points:
            raise ValueError(
                f"{name} has {arr.size} points but the grid has {self.grid.total_points}"
            )
        if arr.shape != self.grid.shape and arr.ndim != 1:
            raise ValueError(
                f"{name} shape {arr.shape} does not match grid shape {self.grid.shape}"
            )
        return arr.reshape(self.grid.shape)

    def _state_replaced(self) -> None:
        self.transform_forward()
        self.update_atom_number()

    def update_atom_number(self) -> float:
        """Recompute the cached atom number from the position space buffer."""
        self.atom_number = calculate_atom_num(self)
        return self.atom_number

    def density(self) -> np.ndarray:
        """Fresh array of ``sum_m |psi_m|^2`` on the grid."""
        return density(self._data)

    @property
    def components(self) -> np.ndarray:
        """
        Position space buffer with a leading component axis.

        Shape ``(n_components, *grid.shape)`` for every wavefunction type,
        so code that handles scalar and spin-1 states alike indexes this
        rather than ``component``.
        """
        return self._data

    @property
    def fourier_components(self) -> np.ndarray:
        """Fourier space buffer with a leading component axis."""
        return self._fourier_data

    def copy(self):
        new = self.__class__(self.grid, workers=self.workers)
        np.copyto(new._data, self._data)
        np.copyto(new._fourier_data, self._fourier_data)
        new.atom_number = self.atom_number
        return new

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(grid={self.grid!r}, "
            f"atom_number={self.atom_number:.6g})"
        )


class Wavefunction(_WavefunctionBase):
    """
    Scalar condensate wavefunction.

    Parameters
    ----------
    grid : Grid
        Grid of the system. It is shared, not copied.
    workers : int
        Number of FFT workers (``-1`` uses all cores).

    Examples
    --------
    >>> grid = Grid((64, 64), (0.5, 0.5))
    >>> psi = Wavefunction(grid)
    >>> psi.set_state(np.ones(grid.shape))
    >>> psi.atom_number
    256.0

    Notes
    -----
    ``component`` is a property here, while
    :meth:`SpinorWavefunction.component` takes the spin projection ``m``.
    Indexing ``components`` works the same way for both.
    """

    n_components = 1

    @property
    def component(self) -> np.ndarray:
        """Position space wavefunction (a view into the internal buffer)."""
        return self._data[0]

    @property
    def fourier_component(self) -> np.ndarray:
        """Fourier space wavefunction (a view into the internal buffer)."""
        return self._fourier_data[0]

    def set_state(self, values) -> None:
        """
        Replace the position space wavefunction.

        The Fourier space buffer and the cached atom number are updated
        straight away.

        Parameters
        ----------
        values : array_like
            State of grid shape, or flat with ``grid.total_points`` entries.

        Raises
        ------
        ValueError
            If the number of points does not match the grid.
        """
        self._data[0] = self._checked(values)
        self._state_replaced()


class SpinorWavefunction(_WavefunctionBase):
    """
    Spin-1 condensate wavefunction with components m = +1, 0, -1.

    The three components live in one stacked buffer of shape
    ``(3, *grid.shape)`` ordered (+1, 0, -1); the FFT plans transform over
    the spatial axes only.
    """

    n_components = 3
    SPIN_PROJECTIONS: Tuple[int, int, int] = (1, 0, -1)

    def __init__(self, grid: Grid, *, workers: int = -1):
        super().__init__(grid, workers=workers)
        self.component_atom_numbers: Dict[int, float] = {m: 0.0 for m in self.SPIN_PROJECTIONS}

    @classmethod
    def _index(cls, m: int) -> int:
        try:
            return cls.SPIN_PROJECTIONS.index(m)
        except ValueError:
            raise KeyError(f"spin-1 has no m={m} component") from None

    def component(self, m: int) -> np.ndarray:
        return self._data[self._index(m)]

    def fourier_component(self, m: int) -> np.ndarray:
        return self._fourier_data[self._index(m)]

    @property
    def plus_component(self) -> np.ndarray:
        return self._data[0]

    @property
    def zero_component(self) -> np.ndarray:
        return self._data[1]

    @property
    def minus_component(self) -> np.ndarray:
        return self._data[2]

    def set_state(self, plus, zero, minus) -> None:
        """
        Replace all three position space components.

        Raises
        ------
        ValueError
            If any component does not match the grid.
        """
        checked = [
            self._checked(values, f"m={m} component")
            for m, values in zip(self.SPIN_PROJECTIONS, (plus, zero, minus))
        ]
        for i, arr in enumerate(checked):
            self._data[i] = arr
        self._state_replaced()

    def update_atom_number(self) -> float:
        self.component_atom_numbers = calculate_component_atom_num(self)
        return super().update_atom_number()

    def component_atom_number(self, m: int) -> float:
        """Cached atom number of component ``m``."""
        self._index(m)
        return self.component_atom_numbers[m]

    def spin_vector(self):
        """Local ``(F_perp, F_z)`` of the current position space state."""
        return spin_vector(*self._data)

    def copy(self):
        new = super().copy()
        new.component_atom_numbers = dict(self.component_atom_numbers)
        return new
