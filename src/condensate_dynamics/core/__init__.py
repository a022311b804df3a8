"""
Core split-step Fourier machinery: grids, wavefunctions and evolution.
"""

from .grid import Grid
from .parameters import Parameters, SpinorParameters
from .transforms import TransformPlan
from .wavefunction import SpinorWavefunction, Wavefunction
from .evolution import (
    calculate_atom_num,
    calculate_component_atom_num,
    evolve,
    fourier_step,
    interaction_step,
    renormalise_atom_num,
    split_step,
)

__all__ = [
    "Grid",
    "Parameters",
    "SpinorParameters",
    "TransformPlan",
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
