"""
Uniform Cartesian grids for split-step Fourier propagation.

A single :class:`Grid` covers 1D, 2D and 3D systems. Position space is
centred on zero, and the reciprocal mesh is built directly in FFT order
(bin 0 is the DC component), matching the layout of ``scipy.fft``.
"""

from __future__ import annotations

from typing import Tuple, Union

import numpy as np

PointsLike = Union[int, Tuple[int, ...]]
SpacingLike = Union[float, Tuple[float, ...]]

_AXIS_NAMES = ("x", "y", "z")


def _as_tuple(value, name: str) -> tuple:
    if np.ndim(value) == 0:
        return (value,)
    out = tuple(value)
    if len(out) == 0:
        raise ValueError(f"{name} must not be empty")
    return out


def fourier_axis(points: int, spacing: float) -> np.ndarray:
    """
    Wavenumbers of one axis in FFT order.

    Index ``i < N/2`` maps to ``i * dk`` and index ``i >= N/2`` maps to
    ``(i - N) * dk`` with ``dk = pi / (N/2 * h)``.
    """
    dk = np.pi / (points / 2.0 * spacing)
    i = np.arange(points)
    return np.where(i < points / 2.0, i, i - points) * dk


def position_axis(points: int, spacing: float) -> np.ndarray:
    """Coordinates ``(i - N/2) * h`` of one axis, centred on zero."""
    return (np.arange(points) - points / 2.0) * spacing


class Grid:
    """
    Numerical grid of a 1D, 2D or 3D condensate.

    Parameters
    ----------
    points : int or tuple of int
        Number of grid points per axis, ``(Nx[, Ny[, Nz]])``.
    spacing : float or tuple of float
        Grid spacing per axis, ``(hx[, hy[, hz]])``.

    Notes
    -----
    All meshes have the full grid shape and are stored C-contiguously, so
    ``mesh.ravel()`` is the flat buffer with row-major strides. The arrays
    are read-only; a Grid can be shared between many wavefunctions.
    """

    def __init__(self, points: PointsLike, spacing: SpacingLike):
        points = _as_tuple(points, "points")
        spacing = _as_tuple(spacing, "spacing")

        if len(points) != len(spacing):
            raise ValueError("points and spacing must have the same length")
        if not 1 <= len(points) <= 3:
            raise ValueError("Grid supports 1, 2 or 3 dimensions")
        for n in points:
            if int(n) != n or n <= 0:
                raise ValueError(f"grid points must be positive integers, got {n}")
        for h in spacing:
            if not h > 0:
                raise ValueError(f"grid spacing must be positive, got {h}")

        self._points: Tuple[int, ...] = tuple(int(n) for n in points)
        self._spacing: Tuple[float, ...] = tuple(float(h) for h in spacing)

        self._construct_grid_params()
        self._construct_mesh()

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------
    def _construct_grid_params(self) -> None:
        self._fourier_spacing = tuple(
            np.pi / (n / 2.0 * h) for n, h in zip(self._points, self._spacing)
        )
        self._length = tuple(n * h for n, h in zip(self._points, self._spacing))

    def _construct_mesh(self) -> None:
        axes = [position_axis(n, h) for n, h in zip(self._points, self._spacing)]
        k_axes = [fourier_axis(n, h) for n, h in zip(self._points, self._spacing)]

        self._mesh = tuple(
            np.ascontiguousarray(m) for m in np.meshgrid(*axes, indexing="ij")
        )
        self._fourier_mesh = tuple(
            np.ascontiguousarray(m) for m in np.meshgrid(*k_axes, indexing="ij")
        )
        self._wavenumber = np.zeros(self._points, dtype=np.float64)
        for k in self._fourier_mesh:
            self._wavenumber += k**2

        for arr in (*self._mesh, *self._fourier_mesh, self._wavenumber):
            arr.flags.writeable = False

    # ------------------------------------------------------------------
    # grid parameters
    # ------------------------------------------------------------------
    @property
    def ndim(self) -> int:
        return len(self._points)

    @property
    def shape(self) -> Tuple[int, ...]:
        """Number of grid points per axis."""
        return self._points

    @property
    def spacing(self) -> Tuple[float, ...]:
        """Position space grid spacing per axis."""
        return self._spacing

    @property
    def fourier_spacing(self) -> Tuple[float, ...]:
        """Fourier space grid spacing per axis, ``pi / (N/2 * h)``."""
        return self._fourier_spacing

    @property
    def length(self) -> Tuple[float, ...]:
        """Box length per axis, ``N * h``."""
        return self._length

    @property
    def total_points(self) -> int:
        return int(np.prod(self._points))

    @property
    def cell_volume(self) -> float:
        """Product of the grid spacings (quadrature weight)."""
        return float(np.prod(self._spacing))

    @property
    def strides(self) -> Tuple[int, ...]:
        """Row-major element strides: ``index = sum(i_d * stride_d)``."""
        strides = []
        acc = 1
        for n in reversed(self._points):
            strides.append(acc)
            acc *= n
        return tuple(reversed(strides))

    # ------------------------------------------------------------------
    # meshes
    # ------------------------------------------------------------------
    @property
    def mesh(self) -> Tuple[np.ndarray, ...]:
        """Position space mesh, one array per axis."""
        return self._mesh

    @property
    def fourier_mesh(self) -> Tuple[np.ndarray, ...]:
        """Fourier space mesh in FFT order, one array per axis."""
        return self._fourier_mesh

    @property
    def wavenumber(self) -> np.ndarray:
        """Squared wavenumber ``k**2`` in FFT order."""
        return self._wavenumber

    def wavenumber_flat(self) -> np.ndarray:
        return self._wavenumber.ravel()

    def _axis(self, name: str) -> np.ndarray:
        idx = _AXIS_NAMES.index(name)
        if idx >= self.ndim:
            raise AttributeError(f"{self.ndim}D grid has no {name} axis")
        return self._mesh[idx]

    @property
    def x_mesh(self) -> np.ndarray:
        return self._axis("x")

    @property
    def y_mesh(self) -> np.ndarray:
        return self._axis("y")

    @property
    def z_mesh(self) -> np.ndarray:
        return self._axis("z")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(points={self._points}, spacing={self._spacing})"
