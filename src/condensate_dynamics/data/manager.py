"""
HDF5 storage of run parameters and wavefunction snapshots.

File layout
-----------
/parameters/{int_strength, num_time_steps, dt, trap[, c2, p, q]}
/grid/{points, spacing}
/wavefunction                  complex, shape (prod(N), n_frames)    scalar
/wavefunction/{plus,zero,minus} complex, shape (prod(N), n_frames)   spin-1
/time                          float,   shape (n_frames,)

Frames grow along the last axis; each saved snapshot is the flattened
row-major position space state.
"""

from __future__ import annotations

import os
from typing import Optional

import h5py
import numpy as np

from ..core.grid import Grid
from ..core.parameters import Parameters, SpinorParameters
from ..core.wavefunction import SpinorWavefunction, _WavefunctionBase

_SPINOR_KEYS = ("plus", "zero", "minus")


class DataManager:
    """
    Write one simulation run to an HDF5 file.

    Parameters
    ----------
    filename : str
        Output path.
    params : Parameters or SpinorParameters
        Recorded once under ``/parameters``. Spinor parameters switch the
        file to the three-component layout.
    grid : Grid
        Recorded once under ``/grid``.
    overwrite : bool
        Truncate an existing file. If False and the file exists,
        ``FileExistsError`` is raised.
    """

    def __init__(
        self,
        filename: str,
        params: Parameters,
        grid: Grid,
        *,
        overwrite: bool = True,
    ):
        if not overwrite and os.path.exists(filename):
            raise FileExistsError(
                f"{filename} already exists; pass overwrite=True to replace it"
            )
        self.filename = filename
        self.grid = grid
        self.spinor = isinstance(params, SpinorParameters)
        self.save_index = 0
        self.file = h5py.File(filename, "w")

        try:
            self._save_parameters(params, grid)
            self._generate_wavefunction_datasets(grid)
        except BaseException:
            self.file.close()
            raise

    def _save_parameters(self, params: Parameters, grid: Grid) -> None:
        self.file.create_dataset("parameters/int_strength", data=params.int_strength)
        self.file.create_dataset("parameters/num_time_steps", data=params.num_time_steps)
        self.file.create_dataset("parameters/dt", data=params.time_step)
        self.file.create_dataset("parameters/trap", data=params.trap)
        if self.spinor:
            self.file.create_dataset("parameters/c2", data=params.c2)
            self.file.create_dataset("parameters/p", data=params.p)
            self.file.create_dataset("parameters/q", data=params.q)

        self.file.create_dataset("grid/points", data=np.asarray(grid.shape, dtype=np.int64))
        self.file.create_dataset("grid/spacing", data=np.asarray(grid.spacing, dtype=np.float64))

    def _generate_wavefunction_datasets(self, grid: Grid) -> None:
        total = grid.total_points
        chunk = (max(total // 4, 1), 1)
        names = [f"wavefunction/{k}" for k in _SPINOR_KEYS] if self.spinor else ["wavefunction"]
        for name in names:
            self.file.create_dataset(
                name,
                shape=(total, 0),
                maxshape=(total, None),
                dtype=np.complex128,
                chunks=chunk,
            )
        self.file.create_dataset("time", shape=(0,), maxshape=(None,), dtype=np.float64)

    def save_wavefunction(self, wfn: _WavefunctionBase, time: Optional[float] = None) -> int:
        """
        Append the position space state of ``wfn`` as a new frame.

        A backward transform is performed first so the position space
        buffer reflects the latest Fourier space state.

        Returns
        -------
        int
            Index of the frame just written.
        """
        if isinstance(wfn, SpinorWavefunction) != self.spinor:
            raise TypeError("wavefunction type does not match the file layout")
        if wfn.grid.shape != self.grid.shape or wfn.grid.spacing != self.grid.spacing:
            raise ValueError("wavefunction grid does not match the file grid")

        wfn.transform_backward()

        idx = self.save_index
        total = self.grid.total_points
        if self.spinor:
            targets = zip((f"wavefunction/{k}" for k in _SPINOR_KEYS), wfn.components)
        else:
            targets = [("wavefunction", wfn.components[0])]
        for name, comp in targets:
            ds = self.file[name]
            ds.resize((total, idx + 1))
            ds[:, idx] = comp.reshape(-1)

        ds_time = self.file["time"]
        ds_time.resize((idx + 1,))
        ds_time[idx] = np.nan if time is None else float(time)

        self.save_index += 1
        return idx

    def close(self) -> None:
        if self.file.id.valid:
            self.file.close()

    def __enter__(self) -> "DataManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.filename!r}, frames={self.save_index})"


def load_grid(filename: str) -> Grid:
    """Rebuild the Grid recorded in ``filename``."""
    with h5py.File(filename, "r") as f:
        points = tuple(int(n) for n in f["grid/points"][()])
        spacing = tuple(float(h) for h in f["grid/spacing"][()])
    return Grid(points, spacing)


def load_wavefunction(
    filename: str,
    index: int = -1,
    component: Optional[str] = None,
) -> np.ndarray:
    """
    Read one frame back, reshaped to the grid.

    Parameters
    ----------
    filename : str
        HDF5 file written by :class:`DataManager`.
    index : int
        Frame index (negative counts from the end).
    component : {"plus", "zero", "minus"}, optional
        For spin-1 files; if omitted all three are returned stacked as
        ``(3, *shape)``.
    """
    with h5py.File(filename, "r") as f:
        shape = tuple(int(n) for n in f["grid/points"][()])
        n_frames = f["time"].shape[0]
        if not -n_frames <= index < n_frames:
            raise IndexError(f"frame {index} out of range for {n_frames} frames")
        index %= n_frames
        node = f["wavefunction"]
        if isinstance(node, h5py.Group):
            keys = _SPINOR_KEYS if component is None else (component,)
            for k in keys:
                if k not in node:
                    raise KeyError(f"no spin component {k!r} in {filename}")
            frames = [node[k][:, index].reshape(shape) for k in keys]
            return frames[0] if component is not None else np.stack(frames)
        if component is not None:
            raise KeyError(f"{filename} holds a scalar wavefunction")
        return node[:, index].reshape(shape)


def load_times(filename: str) -> np.ndarray:
    with h5py.File(filename, "r") as f:
        return f["time"][()]
