"""Configuration dataclasses for imaging-diffusion runs.

All frozen dataclasses that parameterise the histogram, the stand-in atom
cloud and scattering source, and the run itself live here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from imaging_diffusion.config.constants import (
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
)

__all__ = [
    "CloudConfig",
    "HistogramConfig",
    "ImagingConfig",
    "OutputMode",
    "ScatteringConfig",
]


class OutputMode(Enum):
    """Where scattered photons go each step. Exactly one mode per run."""

    HISTOGRAM = "histogram"
    EVENT_STORE = "event_store"
    CSV_STREAM = "csv_stream"


@dataclass(frozen=True)
class HistogramConfig:
    """Spatial histogram geometry: a cube of width ``domain_size`` centered at the origin."""

    domain_size: float = DEFAULT_DOMAIN_SIZE
    cell_number: int = DEFAULT_CELL_NUMBER

    def __post_init__(self) -> None:
        if not (math.isfinite(self.domain_size) and self.domain_size > 0.0):
            raise ValueError("domain_size must be a positive finite number")
        if self.cell_number < 1:
            raise ValueError("cell_number must be >= 1")

    @property
    def cell_size(self) -> float:
        return self.domain_size / self.cell_number


@dataclass(frozen=True)
class ScatteringConfig:
    """Stand-in scattering source settings."""

    rate: float = DEFAULT_SCATTERING_RATE
    n_channels: int = DEFAULT_N_CHANNELS
    fluctuations: bool = True

    def __post_init__(self) -> None:
        if not (math.isfinite(self.rate) and self.rate >= 0.0):
            raise ValueError("rate must be a non-negative finite number")
        if self.n_channels < 1:
            raise ValueError("n_channels must be >= 1")


@dataclass(frozen=True)
class CloudConfig:
    """Initial Gaussian atom cloud centered at the origin and at rest on average."""

    n_atoms: int = DEFAULT_N_ATOMS
    position_sigma: float = DEFAULT_POSITION_SIGMA
    velocity_sigma: float = DEFAULT_VELOCITY_SIGMA

    def __post_init__(self) -> None:
        if self.n_atoms < 0:
            raise ValueError("n_atoms must be >= 0")
        if self.position_sigma < 0.0:
            raise ValueError("position_sigma must be >= 0")
        if self.velocity_sigma < 0.0:
            raise ValueError("velocity_sigma must be >= 0")


@dataclass(frozen=True)
class ImagingConfig:
    """Top-level parameters of one imaging run."""

    steps: int = round(DEFAULT_EXPOSURE / DEFAULT_TIMESTEP)
    dt: float = DEFAULT_TIMESTEP
    mode: OutputMode = OutputMode.EVENT_STORE
    out_dir: Path = Path("data")
    seed: int | None = None
    max_workers: int | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    histogram: HistogramConfig = field(default_factory=HistogramConfig)
    scattering: ScatteringConfig = field(default_factory=ScatteringConfig)
    cloud: CloudConfig = field(default_factory=CloudConfig)
    write_step_log: bool = True

    def __post_init__(self) -> None:
        if self.steps < 1:
            raise ValueError("steps must be >= 1")
        if not (math.isfinite(self.dt) and self.dt > 0.0):
            raise ValueError("dt must be a positive finite number")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

    @classmethod
    def from_exposure(
        cls, exposure: float, dt: float = DEFAULT_TIMESTEP, **kwargs: object
    ) -> ImagingConfig:
        """Build a config whose step count covers ``exposure`` seconds."""
        if not (math.isfinite(exposure) and exposure > 0.0):
            raise ValueError("exposure must be a positive finite number")
        if not (math.isfinite(dt) and dt > 0.0):
            raise ValueError("dt must be a positive finite number")
        # Rounded to 9 places so float noise never adds a step.
        steps = max(1, math.ceil(round(exposure / dt, 9)))
        return cls(steps=steps, dt=dt, **kwargs)  # type: ignore[arg-type]
