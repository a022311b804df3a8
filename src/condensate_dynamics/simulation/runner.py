"""
condensate_dynamics/simulation/runner.py
========================================
Parameter file -> one run -> results directory.

* The parameter file is a plain Python module; every module-level name
  becomes a parameter (see ``examples/params_example_ground_state.py``).
* Snapshots go to ``wavefunction.h5`` through ``DataManager``; the atom
  number history goes to ``diagnostics.csv``.
"""

from __future__ import annotations

import importlib.util
import json
import os
import shutil
import time
from datetime import datetime
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ..core.diagnostics import calculate_atom_num, calculate_component_atom_num
from ..core.evolution import evolve
from ..core.grid import Grid
from ..core.initial import add_noise, gaussian, harmonic_trap, normalise, vortex_phase
from ..core.parameters import Parameters, SpinorParameters
from ..core.wavefunction import SpinorWavefunction, Wavefunction
from ..data.manager import DataManager

# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

_DEFAULTS: Dict[str, Any] = {
    "description": "run",
    "int_strength": 0.0,
    "trap_frequency": 0.0,
    "time_step": -1e-2j,
    "num_time_steps": 100,
    "save_every": 10,
    "sigma": None,
    "atom_number": None,
    "n_vortices": 0,
    "vortex_threshold": 1.0,
    "noise_amplitude": 0.0,
    "seed": None,
    "spinor": False,
    "populations": (0.0, 1.0, 0.0),
    "c2": 0.0,
    "p": 0.0,
    "q": 0.0,
}


def _load_params(path: str):
    spec = importlib.util.spec_from_file_location("params", path)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # type: ignore[union-attr]
    return mod


def _serializable_params(mod) -> Dict[str, Any]:
    keep = (str, int, float, bool, complex, list, dict, tuple,
            type(None), np.ndarray, np.generic)
    out: Dict[str, Any] = {}
    for k in dir(mod):
        if k.startswith("__"):
            continue
        v = getattr(mod, k)
        if isinstance(v, keep):
            out[k] = v
    return out


def _convert(obj):
    if isinstance(obj, complex):
        return {"real": obj.real, "imag": obj.imag}
    elif isinstance(obj, np.ndarray):
        return [_convert(x) for x in obj.tolist()]
    elif isinstance(obj, (list, tuple)):
        return [_convert(x) for x in obj]
    elif isinstance(obj, dict):
        return {k: _convert(v) for k, v in obj.items()}
    elif isinstance(obj, np.generic):
        return _convert(obj.item())
    else:
        return obj


def _make_root(desc: str) -> str:
    now = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    root = os.path.join("results", f"{now}_{desc}")
    os.makedirs(root, exist_ok=True)
    return root


def _with_defaults(p: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("points", "spacing"):
        if key not in p:
            raise KeyError(f"parameter file must define '{key}'")
    merged = dict(_DEFAULTS)
    merged.update(p)
    return merged


# ----------------------------------------------------------------------
# Building blocks
# ----------------------------------------------------------------------


def build_parameters(p: Dict[str, Any], grid: Grid) -> Parameters:
    trap = p.get("trap")
    if trap is None:
        trap = harmonic_trap(grid, p["trap_frequency"]) if np.any(p["trap_frequency"]) else 0.0

    common = dict(
        int_strength=p["int_strength"],
        trap=trap,
        num_time_steps=p["num_time_steps"],
        time_step=p["time_step"],
    )
    if p["spinor"]:
        return SpinorParameters(c2=p["c2"], p=p["p"], q=p["q"], **common)
    return Parameters(**common)


def build_initial_state(p: Dict[str, Any], grid: Grid) -> np.ndarray:
    """Gaussian envelope, optional vortex phase and noise, optionally normalised."""
    rng = np.random.default_rng(p["seed"])

    sigma = p["sigma"]
    if sigma is None:
        sigma = tuple(L / 8 for L in grid.length)
    state = gaussian(grid, sigma)

    if p["n_vortices"]:
        theta = vortex_phase(p["n_vortices"], p["vortex_threshold"], grid, rng=rng)
        state = state * np.exp(1j * theta)
    if p["noise_amplitude"]:
        state = add_noise(state, p["noise_amplitude"], rng=rng)
    if p["atom_number"] is not None:
        state = normalise(state, grid, p["atom_number"])
    return state


def build_wavefunction(p: Dict[str, Any], grid: Grid):
    state = p.get("initial_state")
    if state is None:
        state = build_initial_state(p, grid)

    if p["spinor"]:
        pops = np.asarray(p["populations"], dtype=float)
        if pops.shape != (3,) or np.any(pops < 0) or pops.sum() <= 0:
            raise ValueError("populations must be three non-negative weights")
        amps = np.sqrt(pops / pops.sum())
        wfn = SpinorWavefunction(grid)
        wfn.set_state(amps[0] * state, amps[1] * state, amps[2] * state)
    else:
        wfn = Wavefunction(grid)
        wfn.set_state(state)
    return wfn


# ----------------------------------------------------------------------
# Core: single run
# ----------------------------------------------------------------------


def run_simulation(p: Dict[str, Any], outdir: Optional[str] = None, verbose: bool = False):
    """
    Run one simulation described by the parameter dict ``p``.

    Returns the final wavefunction. If ``outdir`` is given, snapshots,
    ``parameters.json`` and ``diagnostics.csv`` are written there.
    """
    p = _with_defaults(p)
    grid = Grid(p["points"], p["spacing"])
    params = build_parameters(p, grid)
    wfn = build_wavefunction(p, grid)

    rows = []
    spinor = isinstance(wfn, SpinorWavefunction)

    def record(w, prm):
        w.transform_backward()
        row = dict(time=prm.current_time, atom_number=calculate_atom_num(w))
        if spinor:
            for m, n in calculate_component_atom_num(w).items():
                row[f"atom_number_{m:+d}"] = n
        rows.append(row)

    dm = None
    if outdir is not None:
        os.makedirs(outdir, exist_ok=True)
        dm = DataManager(os.path.join(outdir, "wavefunction.h5"), params, grid)
        dm.save_wavefunction(wfn, time=params.current_time)
    record(wfn, params)

    def on_save(w, prm, step):
        if dm is not None:
            dm.save_wavefunction(w, time=prm.current_time)
        record(w, prm)

    try:
        params = evolve(
            wfn,
            params,
            callback=on_save,
            callback_every=max(int(p["save_every"]), 1),
            verbose=verbose,
        )
    finally:
        if dm is not None:
            dm.close()

    if outdir is not None:
        pd.DataFrame(rows).to_csv(os.path.join(outdir, "diagnostics.csv"), index=False)
        with open(os.path.join(outdir, "parameters.json"), "w") as f:
            json.dump(_convert({k: v for k, v in p.items() if k != "initial_state"}), f, indent=2)

    return wfn


def run_all(param_path: str, verbose: bool = False) -> str:
    params = _load_params(param_path)
    p_dict = _serializable_params(params)

    root = _make_root(p_dict.get("description", _DEFAULTS["description"]))
    shutil.copy(param_path, os.path.join(root, "params.py"))

    run_simulation(p_dict, outdir=root, verbose=verbose)
    return root


# ----------------------------------------------------------------------
# CLI entry point
# ----------------------------------------------------------------------


def main(argv=None) -> None:
    import argparse

    ap = argparse.ArgumentParser(description="Run a split-step GPE simulation")
    ap.add_argument("paramfile", help="parameter .py file")
    ap.add_argument("-v", "--verbose", action="store_true", help="print progress")
    args = ap.parse_args(argv)

    t0 = time.perf_counter()
    root = run_all(args.paramfile, verbose=args.verbose)
    print(f"Results written to {root}")
    print(f"Finished in {(time.perf_counter()-t0):.1f}s")


if __name__ == "__main__":
    main()
