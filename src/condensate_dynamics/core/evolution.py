"""
Split-step Fourier evolution of the Gross-Pitaevskii equation.

One full step is the symmetric (Strang) splitting

    kinetic half step -> backward FFT -> interaction step -> forward FFT
    -> kinetic half step

which is second order in the time step. The functions are stateless; all
state lives in the Wavefunction. On entry to :func:`split_step` the Fourier
space buffer must be current (``set_state`` and ``transform_forward``
guarantee this), and on exit the Fourier space buffer is current again.

Real and imaginary time steps go through the same formulas. In imaginary
time the norm decays, so :func:`evolve` renormalises after every step.
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Union

import numpy as np

from . import _splitstep_kernels as _k
from .diagnostics import calculate_atom_num, calculate_component_atom_num
from .parameters import Parameters, SpinorParameters
from .wavefunction import SpinorWavefunction, Wavefunction, _WavefunctionBase

AnyWavefunction = Union[Wavefunction, SpinorWavefunction]

__all__ = [
    "fourier_step",
    "interaction_step",
    "split_step",
    "evolve",
    "calculate_atom_num",
    "calculate_component_atom_num",
    "renormalise_atom_num",
]


def _check_pair(wfn: _WavefunctionBase, params: Parameters) -> None:
    if isinstance(wfn, SpinorWavefunction):
        if not isinstance(params, SpinorParameters):
            raise TypeError("SpinorWavefunction requires SpinorParameters")
    elif not isinstance(wfn, Wavefunction):
        raise TypeError(f"unsupported wavefunction type {type(wfn).__name__}")


def _flat(a: np.ndarray) -> np.ndarray:
    # buffers are C-contiguous, so this is a view
    return a.reshape(-1)


def fourier_step(wfn: AnyWavefunction, params: Parameters) -> None:
    """
    Kinetic half step in Fourier space.

    Multiplies the Fourier space buffer by ``exp(-i/4 dt k^2)``. For spin-1
    the m = +/-1 components pick up the quadratic Zeeman shift,
    ``exp(-i/4 dt (k^2 + 2q))``.
    """
    _check_pair(wfn, params)
    k2 = wfn.grid.wavenumber_flat()
    dt = params.time_step

    if isinstance(wfn, SpinorWavefunction):
        shifts = (2.0 * params.q, 0.0, 2.0 * params.q)
    else:
        shifts = (0.0,)

    for buf, shift in zip(wfn.fourier_components, shifts):
        _k.kinetic_phase(_flat(buf), k2, dt, shift)


def interaction_step(
    wfn: AnyWavefunction,
    params: Parameters,
    trap: Optional[np.ndarray] = None,
) -> None:
    """
    Nonlinear full step in position space.

    Scalar: ``psi *= exp(-i dt (V + g |psi|^2))``.

    Spin-1: the local spin rotation generated by ``c2 F.f`` followed by
    ``exp(-i dt (V - p m + c0 n))`` on each component, with ``n`` the total
    density. Grid points with ``|F| < 1e-8`` skip the rotation term.

    ``trap`` may be passed pre-broadcast to the grid shape (as returned by
    ``params.trap_on``); otherwise it is taken from ``params``.
    """
    _check_pair(wfn, params)
    if trap is None:
        trap = params.trap_on(wfn.grid.shape)
    elif trap.shape != wfn.grid.shape:
        raise ValueError(
            f"trap shape {trap.shape} does not match grid shape {wfn.grid.shape}"
        )
    trap = _flat(trap)
    dt = params.time_step

    if isinstance(wfn, SpinorWavefunction):
        plus, zero, minus = (_flat(c) for c in wfn.components)
        _k.spinor_interaction(
            plus, zero, minus, trap, params.c0, params.c2, params.p, dt
        )
    else:
        _k.scalar_interaction(_flat(wfn.component), trap, params.int_strength, dt)


def split_step(
    wfn: AnyWavefunction,
    params: Parameters,
    trap: Optional[np.ndarray] = None,
) -> None:
    """One symmetric split step. Fourier space is current on return."""
    fourier_step(wfn, params)
    wfn.transform_backward()
    interaction_step(wfn, params, trap)
    wfn.transform_forward()
    fourier_step(wfn, params)


def renormalise_atom_num(wfn: AnyWavefunction) -> float:
    """
    Restore the cached atom number of the wavefunction.

    Position space is first brought up to date from the Fourier space
    buffer. Both buffers are then scaled by ``sqrt(N_target / N_current)``
    so they stay transforms of each other.

    Returns
    -------
    float
        The scale factor that was applied.

    Raises
    ------
    ValueError
        If the current atom number is zero.
    """
    wfn.transform_backward()
    current = calculate_atom_num(wfn)
    if current <= 0.0:
        raise ValueError("cannot renormalise a wavefunction with zero atom number")

    factor = math.sqrt(wfn.atom_number / current)
    _k.scale_inplace(_flat(wfn.components), factor)
    _k.scale_inplace(_flat(wfn.fourier_components), factor)
    return factor


StepCallback = Callable[[AnyWavefunction, Parameters, int], None]


def evolve(
    wfn: AnyWavefunction,
    params: Parameters,
    n_steps: Optional[int] = None,
    *,
    callback: Optional[StepCallback] = None,
    callback_every: int = 1,
    verbose: bool = False,
) -> Parameters:
    """
    Run ``n_steps`` split steps (default ``params.num_time_steps``).

    The atom number is renormalised after every step when the time step
    has an imaginary part.

    Parameters
    ----------
    wfn : Wavefunction or SpinorWavefunction
        State to evolve in place. Its Fourier space buffer must be current.
    params : Parameters or SpinorParameters
        Run parameters.
    n_steps : int, optional
        Number of steps; defaults to ``params.num_time_steps``.
    callback : callable, optional
        ``callback(wfn, params, step)`` called after every
        ``callback_every`` steps with the advanced parameters.
    callback_every : int
        Callback stride.
    verbose : bool
        Print progress.

    Returns
    -------
    Parameters
        ``params`` with ``current_time`` advanced.
    """
    n_steps = params.num_time_steps if n_steps is None else int(n_steps)
    if n_steps < 0:
        raise ValueError("n_steps must be non-negative")
    if callback_every < 1:
        raise ValueError("callback_every must be >= 1")

    trap = params.trap_on(wfn.grid.shape)
    report_every = max(n_steps // 10, 1)
    for step in range(n_steps):
        split_step(wfn, params, trap)
        if params.imaginary_time:
            renormalise_atom_num(wfn)
        params = params.advance()

        if callback is not None and (step + 1) % callback_every == 0:
            callback(wfn, params, step + 1)
        if verbose and (step + 1) % report_every == 0:
            print(f"step {step + 1}/{n_steps}  t = {params.current_time:.4g}")

    return params
