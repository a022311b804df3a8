import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))
import numpy as np
import pytest
from condensate_dynamics.core.evolution import (
    calculate_atom_num,
    evolve,
    fourier_step,
    interaction_step,
    renormalise_atom_num,
    split_step,
)
from condensate_dynamics.core.grid import Grid
from condensate_dynamics.core.initial import gaussian, harmonic_trap, normalise, plane_wave
from condensate_dynamics.core.parameters import Parameters, SpinorParameters
from condensate_dynamics.core.wavefunction import SpinorWavefunction, Wavefunction


def _random_state(grid, seed=0):
    rng = np.random.default_rng(seed)
    return gaussian(grid, 2.0) * np.exp(1j * rng.uniform(0, 0.1, size=grid.shape))


class TestParameters:
    def test_imaginary_time_flag(self):
        assert Parameters(time_step=-1e-2j).imaginary_time
        assert not Parameters(time_step=1e-2).imaginary_time

    def test_advance(self):
        p = Parameters(time_step=0.5, current_time=1.0)
        q = p.advance(4)
        assert q.current_time == 3.0
        assert p.current_time == 1.0

    def test_trap_scalar_broadcast(self):
        p = Parameters(trap=2.0)
        trap = p.trap_on((4, 3))
        assert trap.shape == (4, 3)
        assert np.all(trap == 2.0)

    def test_trap_shape_mismatch(self):
        p = Parameters(trap=np.zeros(10))
        with pytest.raises(ValueError):
            p.trap_on((4, 4))

    def test_complex_trap_rejected(self):
        with pytest.raises(TypeError):
            Parameters(trap=np.zeros(4, dtype=complex))

    @pytest.mark.parametrize("kwargs", [dict(num_time_steps=-1), dict(num_time_steps=1.5), dict(time_step=0.0)])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            Parameters(**kwargs)

    def test_trap_read_only(self):
        p = Parameters(trap=np.zeros(4))
        with pytest.raises(ValueError):
            p.trap[0] = 1.0


def test_fourier_step_phase():
    grid = Grid((16, 8), (0.5, 0.5))
    wfn = Wavefunction(grid)
    wfn.set_state(_random_state(grid))
    before = wfn.fourier_component.copy()
    params = Parameters(time_step=0.01 - 0.002j)

    fourier_step(wfn, params)

    expected = before * np.exp(-0.25j * params.time_step * grid.wavenumber)
    assert np.allclose(wfn.fourier_component, expected)


def test_interaction_step_phase():
    grid = Grid(64, 0.25)
    trap = harmonic_trap(grid, 1.0)
    wfn = Wavefunction(grid)
    psi = _random_state(grid)
    wfn.set_state(psi)
    params = Parameters(int_strength=3.0, trap=trap, time_step=0.02)

    interaction_step(wfn, params)

    expected = psi * np.exp(-1j * 0.02 * (trap + 3.0 * np.abs(psi) ** 2))
    assert np.allclose(wfn.component, expected)


def test_interaction_step_trap_mismatch():
    grid = Grid(64, 0.25)
    wfn = Wavefunction(grid)
    wfn.set_state(np.ones(64))
    with pytest.raises(ValueError):
        interaction_step(wfn, Parameters(trap=np.zeros(32)))


def test_split_step_order():
    grid = Grid((16, 16), (0.5, 0.5))
    params = Parameters(int_strength=2.0, trap=harmonic_trap(grid, 0.5), time_step=0.01)
    psi = _random_state(grid, seed=3)

    wfn = Wavefunction(grid)
    wfn.set_state(psi)
    split_step(wfn, params)

    k2 = grid.wavenumber
    half = np.exp(-0.25j * params.time_step * k2)
    phi = np.fft.ifftn(half * np.fft.fftn(psi))
    phi = phi * np.exp(-1j * params.time_step * (params.trap + 2.0 * np.abs(phi) ** 2))
    expected_k = half * np.fft.fftn(phi)

    assert np.allclose(wfn.fourier_component, expected_k)


def test_calculate_atom_num():
    grid = Grid((32, 32), (0.5, 0.5))
    wfn = Wavefunction(grid)
    wfn.set_state(np.full(grid.shape, 2.0))
    assert np.isclose(calculate_atom_num(wfn), 4.0 * 1024 * 0.25)


def test_atom_number_cache_not_updated_by_step():
    grid = Grid(64, 0.5)
    wfn = Wavefunction(grid)
    wfn.set_state(gaussian(grid, 3.0))
    cached = wfn.atom_number
    split_step(wfn, Parameters(time_step=-0.1j))
    wfn.transform_backward()
    assert wfn.atom_number == cached
    assert calculate_atom_num(wfn) < cached


def test_renormalise_restores_atom_number():
    grid = Grid((32, 32), (0.5, 0.5))
    wfn = Wavefunction(grid)
    wfn.set_state(normalise(gaussian(grid, 2.0), grid, 10.0))
    params = Parameters(int_strength=1.0, time_step=-0.05j)
    for _ in range(5):
        split_step(wfn, params)

    renormalise_atom_num(wfn)
    assert np.isclose(calculate_atom_num(wfn), 10.0)

    # Fourier buffer was scaled too
    fourier = wfn.fourier_component.copy()
    wfn.transform_forward()
    assert np.allclose(wfn.fourier_component, fourier)


def test_renormalise_idempotent():
    grid = Grid(128, 0.5)
    wfn = Wavefunction(grid)
    wfn.set_state(gaussian(grid, 4.0))
    split_step(wfn, Parameters(int_strength=1.0, time_step=-0.01j))

    renormalise_atom_num(wfn)
    first = wfn.component.copy()
    factor = renormalise_atom_num(wfn)

    assert np.isclose(factor, 1.0, atol=1e-12)
    assert np.allclose(wfn.component, first, rtol=1e-12, atol=1e-14)


def test_renormalise_zero_state():
    grid = Grid(16, 0.5)
    wfn = Wavefunction(grid)
    wfn.set_state(np.zeros(16))
    with pytest.raises(ValueError):
        renormalise_atom_num(wfn)


def test_spinor_wavefunction_needs_spinor_parameters():
    grid = Grid(16, 0.5)
    wfn = SpinorWavefunction(grid)
    with pytest.raises(TypeError):
        fourier_step(wfn, Parameters())
    with pytest.raises(TypeError):
        interaction_step(wfn, Parameters())


def test_scalar_wavefunction_accepts_spinor_subclass_params():
    # SpinorParameters is-a Parameters; scalar runs just ignore c2/p/q
    grid = Grid(16, 0.5)
    wfn = Wavefunction(grid)
    wfn.set_state(np.ones(16))
    split_step(wfn, SpinorParameters(time_step=0.01, c2=1.0))
    assert np.all(np.isfinite(wfn.fourier_component))


class TestEvolve:
    def test_callback_and_time(self):
        grid = Grid(32, 0.5)
        wfn = Wavefunction(grid)
        wfn.set_state(gaussian(grid, 2.0))
        calls = []

        params = evolve(
            wfn,
            Parameters(time_step=0.01, num_time_steps=10),
            callback=lambda w, p, step: calls.append((step, p.current_time)),
            callback_every=5,
        )

        assert [c[0] for c in calls] == [5, 10]
        assert np.isclose(calls[0][1], 0.05)
        assert np.isclose(params.current_time, 0.1)

    def test_explicit_step_count(self):
        grid = Grid(32, 0.5)
        wfn = Wavefunction(grid)
        wfn.set_state(gaussian(grid, 2.0))
        params = evolve(wfn, Parameters(time_step=0.01, num_time_steps=100), n_steps=3)
        assert np.isclose(params.current_time, 0.03)

    def test_invalid_arguments(self):
        grid = Grid(32, 0.5)
        wfn = Wavefunction(grid)
        with pytest.raises(ValueError):
            evolve(wfn, Parameters(time_step=0.01), n_steps=-1)
        with pytest.raises(ValueError):
            evolve(wfn, Parameters(time_step=0.01), n_steps=1, callback_every=0)

    def test_real_time_conserves_norm(self):
        grid = Grid((32, 32), (0.5, 0.5))
        wfn = Wavefunction(grid)
        wfn.set_state(_random_state(grid, seed=5))
        target = wfn.atom_number
        evolve(wfn, Parameters(int_strength=5.0, trap=harmonic_trap(grid, 1.0), time_step=0.005), n_steps=20)
        wfn.transform_backward()
        assert np.isclose(calculate_atom_num(wfn), target, rtol=1e-10)


def test_ground_state_2d():
    grid = Grid((128, 128), (0.5, 0.5))
    params = Parameters(int_strength=1.0, trap=0.0, num_time_steps=250, time_step=-1e-2j)

    wfn = Wavefunction(grid)
    wfn.set_state(normalise(gaussian(grid, np.sqrt(250.0)), grid, 1000.0))
    target = wfn.atom_number

    evolve(wfn, params)
    wfn.transform_backward()
    dens = wfn.density()

    # (i) normalised to the seeded atom number
    assert np.isclose(target, 1000.0)
    assert np.isclose(calculate_atom_num(wfn), target, rtol=1e-10)

    # (ii) peaked at the centre, non-increasing outward along both axes
    centre = (64, 64)
    assert np.unravel_index(np.argmax(dens), dens.shape) == centre
    tol = 1e-10 * dens[centre]
    for profile in (dens[64, :], dens[:, 64]):
        assert np.all(np.diff(profile[64:]) <= tol)
        assert np.all(np.diff(profile[:65]) >= -tol)


@pytest.mark.parametrize("g", [0.0, 1.0])
def test_plane_wave_phase(g):
    grid = Grid(64, 0.5)
    mode = 3
    wfn = Wavefunction(grid)
    wfn.set_state(plane_wave(grid, (mode,)))
    before = wfn.fourier_component[mode]

    dt = 0.01
    n_steps = 40
    evolve(wfn, Parameters(int_strength=g, time_step=dt), n_steps=n_steps)
    after = wfn.fourier_component[mode]

    t = n_steps * dt
    k2 = grid.wavenumber[mode]
    # uniform density 1, so the interaction adds a global phase g*t
    expected = np.exp(-1j * (0.5 * k2 + g) * t)
    assert np.isclose(after / before, expected, rtol=1e-10, atol=1e-12)
    assert np.isclose(np.angle(after / before), np.angle(expected))


class TestTrapHandling:
    def test_advance_shares_trap(self):
        p = Parameters(trap=np.linspace(0.0, 1.0, 16), time_step=0.01)
        q = p.advance()
        assert q.trap is p.trap
        assert q.advance(5).trap is p.trap

    def test_caller_array_left_writable(self):
        arr = np.zeros(4)
        p = Parameters(trap=arr)
        arr[0] = 1.0
        assert p.trap[0] == 0.0
        assert not p.trap.flags.writeable

    def test_integer_trap_converted(self):
        p = Parameters(trap=np.arange(4))
        assert p.trap.dtype == np.float64

    def test_explicit_trap_matches_params(self):
        grid = Grid((16, 16), (0.5, 0.5))
        params = Parameters(int_strength=2.0, trap=harmonic_trap(grid, 0.5), time_step=0.01)
        psi = _random_state(grid, seed=11)

        a = Wavefunction(grid)
        a.set_state(psi)
        split_step(a, params)

        b = Wavefunction(grid)
        b.set_state(psi)
        split_step(b, params, params.trap_on(grid.shape))

        assert np.array_equal(a.fourier_component, b.fourier_component)

    def test_explicit_trap_wrong_shape(self):
        grid = Grid((16, 16), (0.5, 0.5))
        wfn = Wavefunction(grid)
        wfn.set_state(np.ones(grid.shape))
        with pytest.raises(ValueError):
            interaction_step(wfn, Parameters(), np.zeros(256))

    def test_scalar_trap_evolve_matches_array(self):
        grid = Grid(64, 0.5)
        psi = gaussian(grid, 3.0)

        a = Wavefunction(grid)
        a.set_state(psi)
        evolve(a, Parameters(int_strength=1.0, trap=0.7, time_step=0.01), n_steps=10)

        b = Wavefunction(grid)
        b.set_state(psi)
        evolve(b, Parameters(int_strength=1.0, trap=np.full(64, 0.7), time_step=0.01), n_steps=10)

        assert np.allclose(a.fourier_component, b.fourier_component, rtol=1e-14, atol=1e-14)
