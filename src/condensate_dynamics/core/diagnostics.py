"""
Derived quantities of a wavefunction: density, atom number and spin.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

import numpy as np

if TYPE_CHECKING:
    from .wavefunction import SpinorWavefunction, _WavefunctionBase


def density(components: np.ndarray) -> np.ndarray:
    """Sum of ``|psi_m|^2`` over the leading component axis."""
    return np.sum(components.real**2 + components.imag**2, axis=0)


def calculate_atom_num(wfn: "_WavefunctionBase") -> float:
    """
    Atom number ``sum(|psi|^2) * prod(h)`` from the position space buffer.

    Flat rectangular quadrature; the state is assumed to vanish at the
    edges of the box.
    """
    return float(np.sum(wfn.density()) * wfn.grid.cell_volume)


def calculate_component_atom_num(wfn: "SpinorWavefunction") -> Dict[int, float]:
    """Atom number of each spin component, keyed by spin projection."""
    dv = wfn.grid.cell_volume
    return {
        m: float(np.sum(np.abs(wfn.component(m)) ** 2) * dv)
        for m in wfn.SPIN_PROJECTIONS
    }


def spin_vector(plus: np.ndarray, zero: np.ndarray, minus: np.ndarray):
    """
    Local spin density of a spin-1 state.

    Returns
    -------
    f_perp : np.ndarray (complex)
        Transverse spin ``F_x + i F_y = sqrt(2) (psi_+^* psi_0 + psi_0^* psi_-)``.
    f_z : np.ndarray (real)
        Longitudinal spin ``|psi_+|^2 - |psi_-|^2``.
    """
    f_perp = np.sqrt(2.0) * (np.conj(plus) * zero + np.conj(zero) * minus)
    f_z = np.abs(plus) ** 2 - np.abs(minus) ** 2
    return f_perp, f_z


def magnetisation(wfn: "SpinorWavefunction") -> float:
    """Integrated longitudinal magnetisation ``N_+ - N_-``."""
    n = calculate_component_atom_num(wfn)
    return n[1] - n[-1]
