"""
Parameter-file driven simulation runs.
"""

from .runner import run_all, run_simulation

__all__ = ["run_all", "run_simulation"]
