"""Tests for imaging_diffusion.domain.atoms and scattering sources."""

from __future__ import annotations

import numpy as np
import pytest

from imaging_diffusion.config.types import CloudConfig, ScatteringConfig
from imaging_diffusion.domain.atoms import AtomEnsemble
from imaging_diffusion.domain.scattering import PoissonScatterSource, apply_scattering


def _ensemble(n: int = 3, n_channels: int = 1) -> AtomEnsemble:
    return AtomEnsemble(
        positions=np.zeros((n, 3)),
        velocities=np.tile([1.0, -2.0, 0.5], (n, 1)),
        scattered=np.zeros((n, n_channels)),
        newly_created=np.ones(n, dtype=bool),
    )


class TestAtomEnsemble:
    def test_create_cloud_shapes(self) -> None:
        atoms = AtomEnsemble.create_cloud(
            CloudConfig(n_atoms=7), np.random.default_rng(0), n_channels=2
        )
        assert len(atoms) == 7
        assert atoms.positions.shape == (7, 3)
        assert atoms.velocities.shape == (7, 3)
        assert atoms.scattered.shape == (7, 2)
        assert atoms.newly_created.all()

    def test_zero_sigma_cloud_sits_at_origin(self) -> None:
        cfg = CloudConfig(n_atoms=4, position_sigma=0.0, velocity_sigma=0.0)
        atoms = AtomEnsemble.create_cloud(cfg, np.random.default_rng(0))
        assert np.array_equal(atoms.positions, np.zeros((4, 3)))

    def test_advance_is_ballistic(self) -> None:
        atoms = _ensemble()
        atoms.advance(0.5)
        assert np.allclose(atoms.positions, np.tile([0.5, -1.0, 0.25], (3, 1)))

    def test_maintain_clears_newly_created(self) -> None:
        atoms = _ensemble()
        atoms.maintain()
        assert not atoms.newly_created.any()

    def test_empty(self) -> None:
        atoms = AtomEnsemble.empty(n_channels=3)
        assert len(atoms) == 0
        assert atoms.n_channels == 3

    def test_rejects_mismatched_shapes(self) -> None:
        with pytest.raises(ValueError, match="velocities"):
            AtomEnsemble(
                positions=np.zeros((2, 3)),
                velocities=np.zeros((3, 3)),
                scattered=np.zeros((2, 1)),
                newly_created=np.ones(2, dtype=bool),
            )

    def test_rejects_flat_scattered(self) -> None:
        with pytest.raises(ValueError, match="scattered"):
            AtomEnsemble(
                positions=np.zeros((2, 3)),
                velocities=np.zeros((2, 3)),
                scattered=np.zeros(2),
                newly_created=np.ones(2, dtype=bool),
            )


class TestPoissonScatterSource:
    def test_without_fluctuations_returns_mean(self) -> None:
        source = PoissonScatterSource(
            ScatteringConfig(rate=4.0e6, n_channels=2, fluctuations=False)
        )
        atoms = _ensemble(n=3, n_channels=2)
        values = source.photons_scattered(atoms, 1.0e-6, np.random.default_rng(0))
        assert values.shape == (3, 2)
        assert np.allclose(values, 2.0)

    def test_fluctuations_are_integral_and_non_negative(self) -> None:
        source = PoissonScatterSource(ScatteringConfig(rate=1.0e7, n_channels=1))
        values = source.photons_scattered(_ensemble(n=500), 1.0e-7, np.random.default_rng(3))
        assert (values >= 0).all()
        assert np.array_equal(values, np.round(values))
        assert values.mean() == pytest.approx(1.0, abs=0.2)

    def test_apply_scattering_replaces_array(self) -> None:
        atoms = _ensemble(n=2, n_channels=1)
        source = PoissonScatterSource(ScatteringConfig(rate=3.0e6, fluctuations=False))
        apply_scattering(source, atoms, 1.0e-6, np.random.default_rng(0))
        assert np.allclose(atoms.scattered, 3.0)

    def test_apply_scattering_rejects_wrong_row_count(self) -> None:
        class BadSource:
            def photons_scattered(self, atoms, dt, rng):  # type: ignore[no-untyped-def]
                return np.zeros((len(atoms) + 1, 1))

        with pytest.raises(ValueError, match="scatter source"):
            apply_scattering(BadSource(), _ensemble(), 1.0e-6, np.random.default_rng(0))
