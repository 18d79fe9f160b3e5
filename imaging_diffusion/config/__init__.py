"""Configuration layer: constants and typed config dataclasses."""

from imaging_diffusion.config.constants import (
    ATOMS_DATASET,
    DEFAULT_CELL_NUMBER,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOMAIN_SIZE,
    DEFAULT_EXPOSURE,
    DEFAULT_N_ATOMS,
    DEFAULT_N_CHANNELS,
    DEFAULT_POSITION_SIGMA,
    DEFAULT_SCATTERING_RATE,
    DEFAULT_TIMESTEP,
    DEFAULT_VELOCITY_SIGMA,
    EVENT_STORE_SCHEMA_VERSION,
    HISTOGRAM_COUNTER_MAX,
    PHOTON_CHUNK_ROWS,
    PHOTONS_DATASET,
    STEP_LOG_FLUSH_THRESHOLD,
)
from imaging_diffusion.config.types import (
    CloudConfig,
    HistogramConfig,
    ImagingConfig,
    OutputMode,
    ScatteringConfig,
)

__all__ = [
    "ATOMS_DATASET",
    "CloudConfig",
    "DEFAULT_CELL_NUMBER",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_DOMAIN_SIZE",
    "DEFAULT_EXPOSURE",
    "DEFAULT_N_ATOMS",
    "DEFAULT_N_CHANNELS",
    "DEFAULT_POSITION_SIGMA",
    "DEFAULT_SCATTERING_RATE",
    "DEFAULT_TIMESTEP",
    "DEFAULT_VELOCITY_SIGMA",
    "EVENT_STORE_SCHEMA_VERSION",
    "HISTOGRAM_COUNTER_MAX",
    "HistogramConfig",
    "ImagingConfig",
    "OutputMode",
    "PHOTON_CHUNK_ROWS",
    "PHOTONS_DATASET",
    "STEP_LOG_FLUSH_THRESHOLD",
    "ScatteringConfig",
]
