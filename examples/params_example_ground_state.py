#!/usr/bin/env python
"""
Parameter file for the simulation runner
========================================

    condensate-run examples/params_example_ground_state.py -v

Every module-level name is a parameter. Results land in
``results/<timestamp>_<description>/``.
"""

# Used in the results directory name
description = "ground_state_2d"

# === Grid ===
points = (128, 128)
spacing = (0.5, 0.5)

# === Evolution ===
time_step = -1e-2j        # imaginary: relax to the ground state
num_time_steps = 250
save_every = 50           # snapshot + diagnostics stride

# === Physics ===
int_strength = 1.0
trap_frequency = 0.0      # harmonic trap 1/2 w^2 r^2; 0 -> no trap

# === Initial state ===
sigma = 15.81             # Gaussian width, exp(-r^2 / 500)
atom_number = None        # keep the seed's own atom number
n_vortices = 0
noise_amplitude = 0.0
seed = 0

# === Spin-1 (set spinor = True to enable) ===
spinor = False
populations = (0.0, 1.0, 0.0)   # m = +1, 0, -1 weights
c2 = 0.0
p = 0.0
q = 0.0
