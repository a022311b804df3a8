#!/usr/bin/env python
"""
2D ground state by imaginary time evolution
===========================================

A Gaussian seed on a 128 x 128 grid relaxes in imaginary time towards the
ground state of a repulsive, untrapped condensate. Snapshots are written to
``examples/results/ground_state.h5`` every 50 steps.

Run:
    python examples/example_2d_ground_state.py
"""

import os
import sys
import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from condensate_dynamics.core.evolution import (
    calculate_atom_num,
    renormalise_atom_num,
    split_step,
)
from condensate_dynamics.core.grid import Grid
from condensate_dynamics.core.parameters import Parameters
from condensate_dynamics.core.wavefunction import Wavefunction
from condensate_dynamics.data import DataManager, load_times, load_wavefunction

# %% Parameters
GRID_POINTS = (128, 128)
GRID_SPACING = (0.5, 0.5)
INT_STRENGTH = 1.0
NUM_TIME_STEPS = 250
TIME_STEP = -1e-2j
SAVE_EVERY = 50

os.makedirs("examples/results", exist_ok=True)
OUTFILE = "examples/results/ground_state.h5"

# %% Grid, wavefunction and initial state
grid = Grid(GRID_POINTS, GRID_SPACING)
x, y = grid.mesh

psi = Wavefunction(grid)
psi.set_state(np.exp(-(x**2 + y**2) / 500))
print(f"Initial atom number: {psi.atom_number:.4f}")

params = Parameters(
    int_strength=INT_STRENGTH,
    trap=0.0,
    num_time_steps=NUM_TIME_STEPS,
    time_step=TIME_STEP,
)

# %% Evolution loop
with DataManager(OUTFILE, params, grid) as dm:
    for i in range(params.num_time_steps):
        split_step(psi, params)
        if params.imaginary_time:
            renormalise_atom_num(psi)
        params = params.advance()

        if i % SAVE_EVERY == 0:
            print(f"On iteration {i}")
            dm.save_wavefunction(psi, time=params.current_time)

psi.transform_backward()
print(f"Final atom number: {calculate_atom_num(psi):.4f}")

# %% Plot the saved frames
times = load_times(OUTFILE)
fig, axes = plt.subplots(1, len(times), figsize=(3 * len(times), 3), sharey=True)
for ax, idx in zip(np.atleast_1d(axes), range(len(times))):
    dens = np.abs(load_wavefunction(OUTFILE, idx)) ** 2
    ax.pcolormesh(x, y, dens, shading="auto")
    ax.set_title(f"t = {times[idx]:.2f}")
    ax.set_xlabel("x")
np.atleast_1d(axes)[0].set_ylabel("y")
plt.tight_layout()
plt.savefig("examples/results/ground_state_frames.png", dpi=150)
plt.show()

fig, ax = plt.subplots(figsize=(6, 4))
ax.plot(grid.x_mesh[:, GRID_POINTS[1] // 2], psi.density()[:, GRID_POINTS[1] // 2], "b-")
ax.set_xlabel("x")
ax.set_ylabel(r"$|\psi(x, 0)|^2$")
ax.grid(True, alpha=0.3)
plt.tight_layout()
plt.show()
