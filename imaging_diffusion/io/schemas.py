"""Record layouts for every persisted imaging artifact.

HDF5 record dtypes for the event store and the Arrow schema of the Parquet
step log are centralised here so that writers and readers work against the
same column contracts.
"""

from __future__ import annotations

import numpy as np
import pyarrow as pa

# ---------------------------------------------------------------------------
# Event store record layouts (fixed field order)
# ---------------------------------------------------------------------------

PHOTON_FIELDS = ("x", "y", "z", "dx", "dy", "dz")
PHOTON_DTYPE = np.dtype([(name, np.float64) for name in PHOTON_FIELDS])
"""One emitted photon: emission position (m) then unit direction."""

ATOM_FIELDS = ("x", "y", "z", "vx", "vy", "vz")
ATOM_DTYPE = np.dtype([(name, np.float64) for name in ATOM_FIELDS])
"""One atom at creation: position (m) then velocity (m/s)."""

# ---------------------------------------------------------------------------
# Step log schema
# ---------------------------------------------------------------------------

STEP_LOG_SCHEMA = pa.schema(
    [
        ("step", pa.int64()),
        ("time", pa.float64()),
        ("n_atoms", pa.int64()),
        ("n_emitters", pa.int64()),
        ("n_photons", pa.int64()),
        ("n_new_atoms", pa.int64()),
        ("n_clipped", pa.int64()),
    ]
)


def columns_to_records(first: np.ndarray, second: np.ndarray, dtype: np.dtype) -> np.ndarray:
    """Pack two ``(n, 3)`` arrays into a structured array of a six-field ``dtype``."""
    first = np.asarray(first, dtype=np.float64).reshape(-1, 3)
    second = np.asarray(second, dtype=np.float64).reshape(-1, 3)
    if first.shape != second.shape:
        raise ValueError(f"column blocks differ in shape: {first.shape} vs {second.shape}")
    records = np.empty(first.shape[0], dtype=dtype)
    names = dtype.names or ()
    for axis, name in enumerate(names[:3]):
        records[name] = first[:, axis]
    for axis, name in enumerate(names[3:]):
        records[name] = second[:, axis]
    return records
