"""Load imaging outputs back for analysis."""

from __future__ import annotations

from pathlib import Path

import h5py
import numpy as np

from imaging_diffusion.config.constants import ATOMS_DATASET, PHOTONS_DATASET


def read_photons(path: Path | str) -> np.ndarray:
    """All photon records of an event store (structured ``PHOTON_DTYPE`` array)."""
    with h5py.File(path, "r") as f:
        return f[PHOTONS_DATASET][()]


def read_initial_atoms(path: Path | str) -> np.ndarray | None:
    """Initial atom records, or None when no atom was ever recorded."""
    with h5py.File(path, "r") as f:
        if ATOMS_DATASET not in f:
            return None
        return f[ATOMS_DATASET][()]


def load_histogram(path: Path | str, cell_number: int) -> np.ndarray:
    """Read a flushed histogram file into a ``[z, y, x]`` uint32 array."""
    text = Path(path).read_text().strip().rstrip(",")
    values = np.array([int(v) for v in text.split(",")] if text else [], dtype=np.uint32)
    expected = cell_number**3
    if values.size != expected:
        raise ValueError(
            f"{path} holds {values.size} cells, expected {expected} for cell_number={cell_number}"
        )
    return values.reshape(cell_number, cell_number, cell_number)


def photon_positions(records: np.ndarray) -> np.ndarray:
    return np.column_stack((records["x"], records["y"], records["z"]))


def photon_directions(records: np.ndarray) -> np.ndarray:
    return np.column_stack((records["dx"], records["dy"], records["dz"]))
