import cmath
import math

import numpy as np
from numba import njit, prange

# Below this spin magnitude the sin(x)/x factor of the spin rotation is set
# to zero instead of dividing by a vanishing number.
SPIN_MAGNITUDE_EPS = 1e-8


@njit(parallel=True, cache=True)
def kinetic_phase(
    fourier: np.ndarray,
    wavenumber: np.ndarray,
    dt: complex,
    shift: float,
) -> None:
    """
    fourier[i] *= exp(-i/4 * dt * (k^2[i] + shift))

    Half of the kinetic propagator exp(-i/2 * dt * k^2); ``shift`` carries
    the quadratic Zeeman term of the spinor components (0 otherwise).

    Parameters
    ----------
    fourier : np.ndarray
        Flat complex Fourier space buffer, modified in place.
    wavenumber : np.ndarray
        Flat k^2 in FFT order, same length as ``fourier``.
    dt : complex
        Time step.
    shift : float
        Constant added to k^2.
    """
    n = fourier.size
    for i in prange(n):
        fourier[i] *= cmath.exp(-0.25j * dt * (wavenumber[i] + shift))


@njit(parallel=True, cache=True)
def scalar_interaction(
    psi: np.ndarray,
    trap: np.ndarray,
    g: float,
    dt: complex,
) -> None:
    """
    psi[i] *= exp(-i * dt * (V[i] + g |psi[i]|^2))
    """
    n = psi.size
    for i in prange(n):
        a = psi[i]
        dens = a.real * a.real + a.imag * a.imag
        psi[i] = a * cmath.exp(-1j * dt * (trap[i] + g * dens))


@njit(parallel=True, cache=True)
def spinor_interaction(
    plus: np.ndarray,
    zero: np.ndarray,
    minus: np.ndarray,
    trap: np.ndarray,
    c0: float,
    c2: float,
    p: float,
    dt: complex,
) -> None:
    """
    Spin-1 interaction step, in place on the three flat component buffers.

    The spin-dependent part exp(-i dt c2 F.f) is applied exactly as
    ``cos(c2 |F| dt) - i sin(c2 |F| dt) (F.f) / |F|``, followed by the
    density, trap and linear Zeeman phase of each component.
    """
    sqrt2 = math.sqrt(2.0)
    n = plus.size
    for i in prange(n):
        pp = plus[i]
        z = zero[i]
        m = minus[i]

        n_plus = pp.real * pp.real + pp.imag * pp.imag
        n_zero = z.real * z.real + z.imag * z.imag
        n_minus = m.real * m.real + m.imag * m.imag

        f_perp = sqrt2 * (pp.conjugate() * z + z.conjugate() * m)
        f_z = n_plus - n_minus
        f_mag = math.sqrt(f_perp.real * f_perp.real + f_perp.imag * f_perp.imag + f_z * f_z)

        cos_term = cmath.cos(c2 * f_mag * dt)
        if f_mag < SPIN_MAGNITUDE_EPS:
            sin_term = 0.0 + 0.0j
        else:
            sin_term = 1j * cmath.sin(c2 * f_mag * dt) / f_mag

        new_plus = cos_term * pp - sin_term * (f_z * pp + f_perp.conjugate() * z / sqrt2)
        new_zero = cos_term * z - sin_term / sqrt2 * (f_perp * pp + f_perp.conjugate() * m)
        new_minus = cos_term * m - sin_term * (f_perp * z / sqrt2 - f_z * m)

        dens = n_plus + n_zero + n_minus
        plus[i] = new_plus * cmath.exp(-1j * dt * (trap[i] - p + c0 * dens))
        zero[i] = new_zero * cmath.exp(-1j * dt * (trap[i] + c0 * dens))
        minus[i] = new_minus * cmath.exp(-1j * dt * (trap[i] + p + c0 * dens))


@njit(parallel=True, cache=True)
def scale_inplace(a: np.ndarray, factor: float) -> None:
    n = a.size
    for i in prange(n):
        a[i] *= factor
