"""Path construction helpers for run output directories.

Centralises the file naming conventions used by the pipeline, the runner and
the CLI.
"""

from __future__ import annotations

from pathlib import Path


def logs_dir(out_dir: Path) -> Path:
    """Return path to the logs subdirectory within an output directory."""
    return out_dir / "logs"


def step_log_path(out_dir: Path) -> Path:
    """Return path to the step log Parquet file."""
    return logs_dir(out_dir) / "step_log.parquet"


def event_store_path(out_dir: Path) -> Path:
    """Return path to the HDF5 photon event store."""
    return out_dir / "photons.h5"


def histogram_path(out_dir: Path) -> Path:
    """Return path to the flushed spatial histogram."""
    return out_dir / "histogram.csv"


def csv_stream_path(out_dir: Path) -> Path:
    """Return path to the plain-text photon stream."""
    return out_dir / "photons.csv"


def plots_dir(out_dir: Path) -> Path:
    """Return path to the rendered figures subdirectory."""
    return out_dir / "plots"
