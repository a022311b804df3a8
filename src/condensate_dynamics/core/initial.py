"""
Builders for initial states and trapping potentials.

Everything here returns plain numpy arrays of grid shape that can be handed
to ``Wavefunction.set_state`` or to ``Parameters(trap=...)``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .grid import Grid

FloatOrSeq = Union[float, Sequence[float]]


def _per_axis(value: FloatOrSeq, grid: Grid, name: str) -> Tuple[float, ...]:
    if np.ndim(value) == 0:
        return (float(value),) * grid.ndim
    out = tuple(float(v) for v in value)
    if len(out) != grid.ndim:
        raise ValueError(f"{name} needs {grid.ndim} entries, got {len(out)}")
    return out


def gaussian(
    grid: Grid,
    sigma: FloatOrSeq,
    centre: Optional[Sequence[float]] = None,
    amplitude: float = 1.0,
) -> np.ndarray:
    """
    Gaussian profile ``A exp(-sum_d (x_d - c_d)^2 / (2 sigma_d^2))``.
    """
    sigma = _per_axis(sigma, grid, "sigma")
    centre = _per_axis(0.0 if centre is None else centre, grid, "centre")
    if any(s <= 0 for s in sigma):
        raise ValueError("sigma must be positive")

    exponent = np.zeros(grid.shape)
    for x, c, s in zip(grid.mesh, centre, sigma):
        exponent += (x - c) ** 2 / (2.0 * s**2)
    return amplitude * np.exp(-exponent).astype(np.complex128)


def normalise(state: np.ndarray, grid: Grid, atom_number: float) -> np.ndarray:
    """Scale ``state`` so that ``sum |state|^2 prod(h) == atom_number``."""
    current = float(np.sum(np.abs(state) ** 2) * grid.cell_volume)
    if current == 0.0:
        raise ValueError("cannot normalise a state that is identically zero")
    return state * np.sqrt(atom_number / current)


def harmonic_trap(grid: Grid, omega: FloatOrSeq) -> np.ndarray:
    """Harmonic potential ``1/2 sum_d omega_d^2 x_d^2``."""
    omega = _per_axis(omega, grid, "omega")
    trap = np.zeros(grid.shape)
    for x, w in zip(grid.mesh, omega):
        trap += 0.5 * w**2 * x**2
    return trap


def plane_wave(grid: Grid, mode: Sequence[int], amplitude: float = 1.0) -> np.ndarray:
    """
    Plane wave ``A exp(i k.x)`` whose wavevector is Fourier bin ``mode``.

    ``mode`` indexes the FFT-ordered reciprocal mesh, so the state is a
    single nonzero Fourier coefficient.
    """
    mode = tuple(int(i) for i in mode)
    if len(mode) != grid.ndim:
        raise ValueError(f"mode needs {grid.ndim} indices")
    phase = np.zeros(grid.shape)
    for x, k in zip(grid.mesh, grid.fourier_mesh):
        phase += k[mode] * x
    return amplitude * np.exp(1j * phase)


def add_noise(
    state: np.ndarray,
    amplitude: float,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Return ``state`` plus complex Gaussian noise of the given amplitude."""
    rng = np.random.default_rng() if rng is None else rng
    noise = rng.normal(size=state.shape) + 1j * rng.normal(size=state.shape)
    return state + amplitude * noise


# ----------------------------------------------------------------------
# vortex phase imprinting (2D)
# ----------------------------------------------------------------------


def vortex_positions(
    n_vortices: int,
    threshold: float,
    grid: Grid,
    max_iter: int = 10000,
    rng: Optional[np.random.Generator] = None,
    verbose: bool = False,
) -> List[Tuple[float, float]]:
    """
    Draw random vortex positions in a 2D box.

    A candidate is rejected when it lies within ``threshold`` of an
    accepted position along both axes. Drawing stops after ``max_iter``
    candidates, in which case fewer positions may be returned.
    """
    if grid.ndim != 2:
        raise ValueError("vortex positions require a 2D grid")
    rng = np.random.default_rng() if rng is None else rng
    lx, ly = grid.length

    if verbose:
        print(f"Finding {n_vortices} vortex positions...")

    positions: List[Tuple[float, float]] = []
    iterations = 0
    while len(positions) < n_vortices:
        pos = (rng.uniform(-lx / 2, lx / 2), rng.uniform(-ly / 2, ly / 2))
        iterations += 1

        too_close = any(
            abs(pos[0] - ax) < threshold and abs(pos[1] - ay) < threshold
            for ax, ay in positions
        )
        if not too_close:
            positions.append(pos)

        if iterations > max_iter:
            print(
                f"⚠️  Max iterations exceeded, only found {len(positions)} suitable positions"
            )
            return positions

    if verbose:
        print(f"Found {n_vortices} positions in {iterations} iterations")
    return positions


def vortex_phase(
    n_vortices: int,
    threshold: float,
    grid: Grid,
    max_iter: int = 10000,
    *,
    positions: Optional[Sequence[Tuple[float, float]]] = None,
    rng: Optional[np.random.Generator] = None,
    verbose: bool = False,
) -> np.ndarray:
    """
    Periodic phase profile of ``n_vortices // 2`` vortex-antivortex pairs.

    The first half of ``positions`` are antivortices and the second half
    vortices. Each pair contributes the doubly periodic dipole phase,
    summed over eleven image cells along y so the profile is continuous
    across the box edges.

    Returns
    -------
    np.ndarray
        Real phase array of grid shape; imprint with ``exp(1j * theta)``.
    """
    if grid.ndim != 2:
        raise ValueError("vortex phase imprinting requires a 2D grid")
    if positions is None:
        positions = vortex_positions(
            n_vortices, threshold, grid, max_iter, rng=rng, verbose=verbose
        )
    positions = list(positions)
    n_pairs = len(positions) // 2

    lx, ly = grid.length
    x_tilde = 2 * np.pi * (grid.x_mesh + lx) / lx
    y_tilde = 2 * np.pi * (grid.y_mesh + ly) / ly

    theta = np.zeros(grid.shape)
    for num in range(n_pairs):
        x_m, y_m = positions[num]
        x_p, y_p = positions[n_pairs + num]

        x_m_tilde = 2 * np.pi * (x_m + lx) / lx
        y_m_tilde = 2 * np.pi * (y_m + ly) / ly
        x_p_tilde = 2 * np.pi * (x_p + lx) / lx
        y_p_tilde = 2 * np.pi * (y_p + ly) / ly

        y_minus = y_tilde - y_m_tilde
        x_minus = x_tilde - x_m_tilde
        y_plus = y_tilde - y_p_tilde
        x_plus = x_tilde - x_p_tilde
        step = np.pi * (np.heaviside(x_plus, 1.0) - np.heaviside(x_minus, 1.0))

        theta_k = np.zeros(grid.shape)
        for k in range(-5, 6):
            theta_k += (
                np.arctan(np.tanh((y_minus + 2 * np.pi * k) / 2) * np.tan((x_minus - np.pi) / 2))
                - np.arctan(np.tanh((y_plus + 2 * np.pi * k) / 2) * np.tan((x_plus - np.pi) / 2))
                + step
            )
        theta_k -= y_tilde * (x_p_tilde - x_m_tilde) / (2 * np.pi)
        theta += theta_k

    if verbose:
        print("Phase constructed!")
    return theta
