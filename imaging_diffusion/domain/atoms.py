"""Columnar atom ensemble: the per-entity state the photon pipeline reads.

The ensemble stands in for the entity storage of the surrounding simulation.
Row ``i`` of every array belongs to atom ``i``. The photon pipeline only reads
positions, velocities, ``scattered`` and ``newly_created``; integration and
flag maintenance belong to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from imaging_diffusion.config.types import CloudConfig


@dataclass
class AtomEnsemble:
    """Positions, velocities and this step's scattering state of every atom."""

    positions: np.ndarray  # (n, 3) m
    velocities: np.ndarray  # (n, 3) m/s
    scattered: np.ndarray  # (n, n_channels) photons scattered this step per channel
    newly_created: np.ndarray  # (n,) bool, cleared by maintain()

    def __post_init__(self) -> None:
        self.positions = np.asarray(self.positions, dtype=np.float64)
        self.velocities = np.asarray(self.velocities, dtype=np.float64)
        self.scattered = np.asarray(self.scattered, dtype=np.float64)
        self.newly_created = np.asarray(self.newly_created, dtype=bool)
        n = self.positions.shape[0]
        if self.positions.shape != (n, 3):
            raise ValueError(f"positions must have shape (n, 3), got {self.positions.shape}")
        if self.velocities.shape != (n, 3):
            raise ValueError(f"velocities must have shape ({n}, 3), got {self.velocities.shape}")
        if self.scattered.ndim != 2 or self.scattered.shape[0] != n:
            raise ValueError(
                f"scattered must have shape ({n}, n_channels), got {self.scattered.shape}"
            )
        if self.newly_created.shape != (n,):
            raise ValueError(
                f"newly_created must have shape ({n},), got {self.newly_created.shape}"
            )

    @classmethod
    def empty(cls, n_channels: int = 1) -> AtomEnsemble:
        return cls(
            positions=np.zeros((0, 3)),
            velocities=np.zeros((0, 3)),
            scattered=np.zeros((0, n_channels)),
            newly_created=np.zeros(0, dtype=bool),
        )

    @classmethod
    def create_cloud(
        cls, config: CloudConfig, rng: np.random.Generator, n_channels: int = 1
    ) -> AtomEnsemble:
        """Sample a Gaussian cloud centered at the origin; every atom starts newly created."""
        n = config.n_atoms
        return cls(
            positions=rng.normal(0.0, config.position_sigma, size=(n, 3)),
            velocities=rng.normal(0.0, config.velocity_sigma, size=(n, 3)),
            scattered=np.zeros((n, n_channels)),
            newly_created=np.ones(n, dtype=bool),
        )

    def __len__(self) -> int:
        return int(self.positions.shape[0])

    @property
    def n_channels(self) -> int:
        return int(self.scattered.shape[1])

    def advance(self, dt: float) -> None:
        """Ballistic drift over one timestep."""
        self.positions += self.velocities * dt

    def maintain(self) -> None:
        """End-of-step bookkeeping: atoms are newly created for exactly one step."""
        self.newly_created[:] = False
