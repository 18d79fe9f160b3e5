"""Centralized domain constants for imaging-diffusion runs.

All magic numbers that appear across multiple modules are defined here.
Consuming modules should import from this module rather than defining
their own inline literals.
"""

from __future__ import annotations

HISTOGRAM_COUNTER_MAX = 2**32 - 1
"""Saturation value of a histogram cell (unsigned 32-bit counter)."""

DEFAULT_DOMAIN_SIZE = 1.0e-3
"""Default histogram domain width in meters (cube centered at the origin)."""

DEFAULT_CELL_NUMBER = 100
"""Default number of histogram cells along one axis."""

DEFAULT_TIMESTEP = 0.1e-6
"""Default integration timestep in seconds; keeps emission at ~0-1 photons per step."""

DEFAULT_EXPOSURE = 15.0e-6
"""Default imaging exposure in seconds."""

DEFAULT_N_ATOMS = 20
"""Default number of atoms in the stand-in cloud."""

DEFAULT_POSITION_SIGMA = 1.0e-4
"""Default standard deviation of initial atom positions in meters."""

DEFAULT_VELOCITY_SIGMA = 1.0e-3
"""Default standard deviation of initial atom velocities in m/s."""

DEFAULT_SCATTERING_RATE = 5.0e6
"""Default total photon scattering rate per atom in photons/s."""

DEFAULT_N_CHANNELS = 1
"""Default number of emission channels (transitions) per atom."""

DEFAULT_CHUNK_SIZE = 4_096
"""Atoms per work chunk handed to one collector worker."""

PHOTON_CHUNK_ROWS = 10_000
"""HDF5 chunk length (records) of the resizable photon dataset."""

STEP_LOG_FLUSH_THRESHOLD = 4_096
"""Flush step-log rows to Parquet once this in-memory row count is reached."""

PHOTONS_DATASET = "photons"
"""Name of the resizable emission dataset in the event store."""

ATOMS_DATASET = "atoms"
"""Name of the write-once initial-state dataset in the event store."""

EVENT_STORE_SCHEMA_VERSION = 1
