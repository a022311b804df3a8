"""
FFT plans bound to wavefunction buffers.

A :class:`TransformPlan` remembers the exact source and destination arrays it
was built for and writes its result into the destination in place, so the
buffers a Wavefunction hands out stay valid across transforms. Both
directions are unnormalised; the caller applies the ``1/prod(N)`` factor
after the backward transform.
"""

from __future__ import annotations

from typing import Literal, Sequence

import numpy as np
import scipy.fft

Direction = Literal["forward", "backward"]


class TransformPlan:
    """
    Unnormalised n-dimensional FFT between two fixed buffers.

    Parameters
    ----------
    source, destination : np.ndarray
        C-contiguous complex128 arrays of identical shape.
    direction : {"forward", "backward"}
        ``forward`` computes ``sum_x psi(x) exp(-i k x)``; ``backward``
        computes ``sum_k psi(k) exp(+i k x)`` without the 1/N factor.
    axes : sequence of int, optional
        Axes to transform over. Defaults to all axes.
    workers : int
        Worker count forwarded to ``scipy.fft`` (``-1`` uses all cores).

    Raises
    ------
    RuntimeError
        If the buffers cannot be planned for.
    """

    def __init__(
        self,
        source: np.ndarray,
        destination: np.ndarray,
        direction: Direction,
        *,
        axes: Sequence[int] | None = None,
        workers: int = -1,
    ):
        if direction not in ("forward", "backward"):
            raise RuntimeError(f"unknown transform direction {direction!r}")
        for name, buf in (("source", source), ("destination", destination)):
            if not isinstance(buf, np.ndarray):
                raise RuntimeError(f"{name} buffer must be a numpy array")
            if buf.dtype != np.complex128:
                raise RuntimeError(f"{name} buffer must be complex128, got {buf.dtype}")
            if not buf.flags.c_contiguous:
                raise RuntimeError(f"{name} buffer must be C-contiguous")
        if source.shape != destination.shape:
            raise RuntimeError(
                f"buffer shapes differ: {source.shape} vs {destination.shape}"
            )
        if np.shares_memory(source, destination):
            raise RuntimeError("source and destination buffers must not overlap")

        self.source = source
        self.destination = destination
        self.direction = direction
        self.axes = tuple(range(source.ndim)) if axes is None else tuple(axes)
        self.workers = workers

    def is_bound_to(self, source: np.ndarray, destination: np.ndarray) -> bool:
        return self.source is source and self.destination is destination

    def execute(self) -> None:
        if self.direction == "forward":
            out = scipy.fft.fftn(
                self.source, axes=self.axes, norm="backward", workers=self.workers
            )
        else:
            out = scipy.fft.ifftn(
                self.source, axes=self.axes, norm="forward", workers=self.workers
            )
        np.copyto(self.destination, out)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(direction={self.direction!r}, "
            f"shape={self.source.shape}, axes={self.axes})"
        )


def create_fft_plans(
    position: np.ndarray,
    fourier: np.ndarray,
    *,
    axes: Sequence[int] | None = None,
    workers: int = -1,
) -> tuple[TransformPlan, TransformPlan]:
    """Build the (forward, backward) plan pair for one buffer pair."""
    forward = TransformPlan(position, fourier, "forward", axes=axes, workers=workers)
    backward = TransformPlan(fourier, position, "backward", axes=axes, workers=workers)
    return forward, backward
