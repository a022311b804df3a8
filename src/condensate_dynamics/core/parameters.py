"""
Parameter containers passed into the evolution functions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

import numpy as np

TrapLike = Union[float, np.ndarray]


@dataclass(frozen=True, eq=False)
class Parameters:
    """
    Parameters of a scalar condensate run.

    Attributes
    ----------
    int_strength : float
        Contact interaction strength g.
    trap : float or np.ndarray
        Trapping potential sampled on the grid. A scalar (default 0.0) is
        a spatially uniform offset, i.e. no trap.
    num_time_steps : int
        Number of split steps the driver intends to run.
    time_step : complex
        Time step. A purely imaginary step relaxes towards the ground
        state; a real step gives unitary dynamics.
    current_time : float
        Simulation time, advanced by the driver.
    """

    int_strength: float = 0.0
    trap: TrapLike = 0.0
    num_time_steps: int = 0
    time_step: complex = 1e-2 + 0j
    current_time: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "int_strength", float(self.int_strength))
        object.__setattr__(self, "time_step", complex(self.time_step))
        object.__setattr__(self, "current_time", float(self.current_time))

        trap = np.asarray(self.trap)
        if np.iscomplexobj(trap):
            raise TypeError("trap must be real valued")
        # frozen float64 traps are shared between copies, anything else is copied
        if trap.dtype != np.float64 or trap.flags.writeable:
            trap = trap.astype(np.float64)
            trap.flags.writeable = False
        object.__setattr__(self, "trap", trap)

        if int(self.num_time_steps) != self.num_time_steps or self.num_time_steps < 0:
            raise ValueError("num_time_steps must be a non-negative integer")
        object.__setattr__(self, "num_time_steps", int(self.num_time_steps))
        if self.time_step == 0:
            raise ValueError("time_step must be non-zero")

    @property
    def imaginary_time(self) -> bool:
        """True when the time step has a non-zero imaginary part."""
        return self.time_step.imag != 0.0

    def trap_on(self, shape: tuple) -> np.ndarray:
        """
        Return the trap as a contiguous float64 array of ``shape``.

        Raises
        ------
        ValueError
            If a non-scalar trap does not match the grid.
        """
        if self.trap.ndim == 0:
            return np.full(shape, float(self.trap), dtype=np.float64)
        if self.trap.size != int(np.prod(shape)):
            raise ValueError(
                f"trap has {self.trap.size} points but the grid has {int(np.prod(shape))}"
            )
        return np.ascontiguousarray(self.trap.reshape(shape))

    def advance(self, n_steps: int = 1) -> "Parameters":
        """Return a copy with ``current_time`` moved on by ``n_steps`` steps."""
        return replace(self, current_time=self.current_time + n_steps * abs(self.time_step))

    def as_dict(self) -> dict:
        return {
            "int_strength": self.int_strength,
            "num_time_steps": self.num_time_steps,
            "time_step": self.time_step,
            "current_time": self.current_time,
        }


@dataclass(frozen=True, eq=False)
class SpinorParameters(Parameters):
    """
    Parameters of a spin-1 condensate run.

    ``int_strength`` plays the role of the density interaction c0.

    Attributes
    ----------
    c2 : float
        Spin-dependent interaction strength.
    p : float
        Linear Zeeman shift.
    q : float
        Quadratic Zeeman shift.
    """

    c2: float = 0.0
    p: float = 0.0
    q: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        for name in ("c2", "p", "q"):
            object.__setattr__(self, name, float(getattr(self, name)))

    @property
    def c0(self) -> float:
        return self.int_strength

    def as_dict(self) -> dict:
        out = super().as_dict()
        out.update(c2=self.c2, p=self.p, q=self.q)
        return out
