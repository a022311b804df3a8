"""
condensate_dynamics
===================

Split-step Fourier solver for the scalar and spin-1 Gross-Pitaevskii
equation on uniform 1D/2D/3D grids.

Typical workflow
----------------
1. Build a :class:`Grid`.
2. Build the :class:`Parameters` of the run.
3. Build a :class:`Wavefunction` on the grid and call ``set_state``.
4. Optionally open a :class:`~condensate_dynamics.data.DataManager`.
5. Call :func:`split_step` / :func:`evolve`, saving snapshots as you go.
"""

from .core import (
    Grid,
    Parameters,
    SpinorParameters,
    SpinorWavefunction,
    Wavefunction,
    calculate_atom_num,
    calculate_component_atom_num,
    evolve,
    fourier_step,
    interaction_step,
    renormalise_atom_num,
    split_step,
)

__version__ = "0.1.0"

__all__ = [
    "Grid",
    "Parameters",
    "SpinorParameters",
    "Wavefunction",
    "SpinorWavefunction",
    "fourier_step",
    "interaction_step",
    "split_step",
    "evolve",
    "calculate_atom_num",
    "calculate_component_atom_num",
    "renormalise_atom_num",
]
