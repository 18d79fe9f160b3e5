"""Sources of the per-atom, per-channel "photons scattered this step" values."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from imaging_diffusion.config.types import ScatteringConfig
from imaging_diffusion.domain.atoms import AtomEnsemble


class ScatterCountSource(Protocol):
    """Anything that can fill ``AtomEnsemble.scattered`` for one step."""

    def photons_scattered(
        self, atoms: AtomEnsemble, dt: float, rng: np.random.Generator
    ) -> np.ndarray:
        """Return an ``(n_atoms, n_channels)`` array of photons scattered this step."""
        ...


class PoissonScatterSource:
    """Uniform-illumination stand-in: every atom scatters at the same total rate.

    The rate is split evenly over ``n_channels``. With fluctuations enabled each
    channel value is a Poisson draw, otherwise it is the (real-valued) mean.
    """

    def __init__(self, config: ScatteringConfig) -> None:
        self.config = config

    def mean_per_channel(self, dt: float) -> float:
        return self.config.rate * dt / self.config.n_channels

    def photons_scattered(
        self, atoms: AtomEnsemble, dt: float, rng: np.random.Generator
    ) -> np.ndarray:
        shape = (len(atoms), self.config.n_channels)
        mean = self.mean_per_channel(dt)
        if self.config.fluctuations:
            return rng.poisson(mean, size=shape).astype(np.float64)
        return np.full(shape, mean, dtype=np.float64)


def apply_scattering(
    source: ScatterCountSource, atoms: AtomEnsemble, dt: float, rng: np.random.Generator
) -> None:
    """Regenerate ``atoms.scattered`` from ``source`` for the current step."""
    scattered = np.asarray(source.photons_scattered(atoms, dt, rng), dtype=np.float64)
    if scattered.ndim != 2 or scattered.shape[0] != len(atoms):
        raise ValueError(
            f"scatter source returned shape {scattered.shape} for {len(atoms)} atoms"
        )
    atoms.scattered = scattered
