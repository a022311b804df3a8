"""
Persistence of simulation runs (HDF5 via h5py).
"""

from .manager import DataManager, load_grid, load_times, load_wavefunction

__all__ = ["DataManager", "load_grid", "load_times", "load_wavefunction"]
