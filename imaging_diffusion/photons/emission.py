"""Isotropic photon emission sampling.

Every worker thread draws from its own ``numpy.random.Generator``; generators
are spawned from one process-wide ``SeedSequence`` so that the streams are
statistically independent and no generator is shared between threads.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

import numpy as np

from imaging_diffusion.io.schemas import PHOTON_DTYPE, columns_to_records

Vector3 = tuple[float, float, float]

_seed_lock = threading.Lock()
_root_seed = np.random.SeedSequence()
_seed_generation = 0
_thread_state = threading.local()


def reseed(seed: int | None = None) -> None:
    """Replace the process-wide entropy root; threads re-derive generators on next use.

    With a fixed seed, a single-threaded run is reproducible. With several
    workers, which thread receives which child stream depends on scheduling.
    """
    global _root_seed, _seed_generation
    with _seed_lock:
        _root_seed = np.random.SeedSequence(seed)
        _seed_generation += 1


def thread_rng() -> np.random.Generator:
    """Return the calling thread's generator, spawning it on first use."""
    if getattr(_thread_state, "generation", None) != _seed_generation:
        with _seed_lock:
            (child,) = _root_seed.spawn(1)
            generation = _seed_generation
        _thread_state.rng = np.random.default_rng(child)
        _thread_state.generation = generation
    return _thread_state.rng


# ---------------------------------------------------------------------------
# Scatter counts
# ---------------------------------------------------------------------------


def _round_channels(values: np.ndarray) -> np.ndarray:
    """Round half away from zero; negative, NaN and infinite values become 0."""
    valid = np.isfinite(values) & (values > 0.0)
    return np.where(valid, np.floor(np.where(valid, values, 0.0) + 0.5), 0.0)


def scatter_counts(scattered: np.ndarray) -> np.ndarray:
    """Per-atom photon counts from an ``(n, n_channels)`` array of channel values."""
    values = np.asarray(scattered, dtype=np.float64)
    if values.ndim == 1:
        values = values.reshape(-1, 1)
    return _round_channels(values).sum(axis=1).astype(np.int64)


def scatter_count(channels: Iterable[float]) -> int:
    """Photon count of one atom: each channel rounded to the nearest integer, then summed."""
    values = np.fromiter(channels, dtype=np.float64)
    return int(_round_channels(values).sum())


# ---------------------------------------------------------------------------
# Emission events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmissionEvent:
    """One photon emitted at ``position`` (m) along unit vector ``direction``."""

    position: Vector3
    direction: Vector3


@dataclass(frozen=True)
class EmissionBatch:
    """Columnar emission events of one step; row ``i`` of both arrays is one photon."""

    positions: np.ndarray
    directions: np.ndarray

    def __post_init__(self) -> None:
        if self.positions.shape != self.directions.shape or self.positions.shape[1:] != (3,):
            raise ValueError(
                "positions and directions must share shape (n, 3), got "
                f"{self.positions.shape} and {self.directions.shape}"
            )

    @classmethod
    def empty(cls) -> EmissionBatch:
        return cls(positions=np.zeros((0, 3)), directions=np.zeros((0, 3)))

    @classmethod
    def from_events(cls, events: Sequence[EmissionEvent]) -> EmissionBatch:
        if not events:
            return cls.empty()
        return cls(
            positions=np.array([e.position for e in events], dtype=np.float64),
            directions=np.array([e.direction for e in events], dtype=np.float64),
        )

    @classmethod
    def concatenate(cls, batches: Iterable[EmissionBatch]) -> EmissionBatch:
        parts = [b for b in batches if len(b) > 0]
        if not parts:
            return cls.empty()
        return cls(
            positions=np.concatenate([b.positions for b in parts]),
            directions=np.concatenate([b.directions for b in parts]),
        )

    def __len__(self) -> int:
        return int(self.positions.shape[0])

    def __iter__(self) -> Iterator[EmissionEvent]:
        for position, direction in zip(
            self.positions.tolist(), self.directions.tolist(), strict=True
        ):
            yield EmissionEvent(position=tuple(position), direction=tuple(direction))

    def to_records(self) -> np.ndarray:
        return columns_to_records(self.positions, self.directions, PHOTON_DTYPE)


def sample_directions(n: int, rng: np.random.Generator | None = None) -> np.ndarray:
    """Draw ``n`` directions uniformly on the unit sphere, shape ``(n, 3)``.

    Uses Archimedes' hat-box theorem: ``z = cos(theta)`` is uniform on [-1, 1]
    and the azimuth is uniform on [0, 2*pi).
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    rng = rng if rng is not None else thread_rng()
    z = rng.uniform(-1.0, 1.0, size=n)
    phi = rng.uniform(0.0, 2.0 * math.pi, size=n)
    rho = np.sqrt(np.clip(1.0 - z * z, 0.0, 1.0))
    return np.column_stack((rho * np.cos(phi), rho * np.sin(phi), z))


def sample_emissions(
    position: Sequence[float], count: float, rng: np.random.Generator | None = None
) -> list[EmissionEvent]:
    """Return ``count`` isotropic emission events at ``position``.

    ``count`` is rounded like a scatter channel; negative, NaN and infinite
    counts yield no events.
    """
    n = scatter_count([count])
    if n == 0:
        return []
    px, py, pz = (float(c) for c in position)
    directions = sample_directions(n, rng).tolist()
    return [EmissionEvent(position=(px, py, pz), direction=tuple(d)) for d in directions]


def sample_batch(
    positions: np.ndarray, counts: np.ndarray, rng: np.random.Generator | None = None
) -> EmissionBatch:
    """Columnar sampling over many atoms; atom ``i`` emits ``counts[i]`` photons.

    Counts follow the same rounding and validity rule as :func:`scatter_counts`.
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    counts = np.asarray(counts)
    if counts.shape != (positions.shape[0],):
        raise ValueError(f"counts must have shape ({positions.shape[0]},), got {counts.shape}")
    counts = _round_channels(counts.astype(np.float64)).astype(np.int64)
    total = int(counts.sum())
    if total == 0:
        return EmissionBatch.empty()
    return EmissionBatch(
        positions=np.repeat(positions, counts, axis=0),
        directions=sample_directions(total, rng),
    )
