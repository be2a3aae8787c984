"""
Run module: resample runner and CLI.
"""

from .runner import run_resample, build_loader, RunResult

__all__ = ["run_resample", "build_loader", "RunResult"]
