"""Tests for imaging_diffusion.photons.collector."""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from imaging_diffusion.photons.collector import EmissionCollector, chunk_slices
from imaging_diffusion.photons.histogram import PhotonHistogram


def _atoms(n: int, seed: int = 0) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    positions = rng.uniform(-1.0, 1.0, size=(n, 3))
    scattered = rng.poisson(1.5, size=(n, 2)).astype(np.float64)
    return positions, scattered


class TestChunkSlices:
    def test_covers_range_exactly_once(self) -> None:
        slices = chunk_slices(10, 4)
        assert [(s.start, s.stop) for s in slices] == [(0, 4), (4, 8), (8, 10)]

    def test_empty(self) -> None:
        assert chunk_slices(0, 4) == []

    def test_rejects_zero_chunk(self) -> None:
        with pytest.raises(ValueError):
            chunk_slices(3, 0)


class TestCollect:
    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_every_event_collected_exactly_once(self, max_workers: int) -> None:
        positions, scattered = _atoms(1_000)
        expected_per_atom = scattered.sum(axis=1).astype(int)
        with EmissionCollector(max_workers=max_workers, chunk_size=37) as collector:
            batch = collector.collect(positions, scattered)
        assert len(batch) == int(expected_per_atom.sum())
        # Each atom's position appears exactly as often as it scattered.
        emitted = Counter(map(tuple, batch.positions.tolist()))
        for position, expected in zip(positions.tolist(), expected_per_atom.tolist(), strict=True):
            assert emitted.get(tuple(position), 0) == expected
        assert np.allclose(np.linalg.norm(batch.directions, axis=1), 1.0)

    def test_zero_scatter_atoms_contribute_nothing(self) -> None:
        positions = np.zeros((5, 3))
        with EmissionCollector(max_workers=2) as collector:
            batch = collector.collect(positions, np.zeros((5, 1)))
        assert len(batch) == 0

    def test_no_atoms(self) -> None:
        with EmissionCollector(max_workers=2) as collector:
            assert len(collector.collect(np.zeros((0, 3)), np.zeros((0, 1)))) == 0

    def test_rejects_mismatched_inputs(self) -> None:
        with EmissionCollector(max_workers=1) as collector:
            with pytest.raises(ValueError, match="scatter counts"):
                collector.collect(np.zeros((3, 3)), np.zeros((2, 1)))

    def test_rejects_bad_arguments(self) -> None:
        with pytest.raises(ValueError):
            EmissionCollector(max_workers=0)
        with pytest.raises(ValueError):
            EmissionCollector(chunk_size=0)


class TestCountInto:
    @pytest.mark.parametrize("max_workers", [1, 3])
    def test_matches_serial_histogram(self, max_workers: int) -> None:
        positions, scattered = _atoms(2_000, seed=7)
        positions *= 1.5  # push some atoms outside the domain
        counts = scattered.sum(axis=1).astype(int)

        expected = PhotonHistogram(domain_size=2.0, cell_number=6)
        expected_in_domain = expected.count_many(np.repeat(positions, counts, axis=0))

        hist = PhotonHistogram(domain_size=2.0, cell_number=6)
        with EmissionCollector(max_workers=max_workers, chunk_size=50) as collector:
            counted = collector.count_into(hist, positions, scattered)

        assert counted == expected_in_domain
        assert counted < int(counts.sum())
        assert np.array_equal(hist.counts(), expected.counts())

    def test_accumulates_across_steps(self) -> None:
        hist = PhotonHistogram(domain_size=2.0, cell_number=2)
        positions = np.array([[-0.5, -0.5, -0.5]])
        with EmissionCollector(max_workers=2) as collector:
            collector.count_into(hist, positions, np.array([[2.0]]))
            collector.count_into(hist, positions, np.array([[3.0]]))
        assert hist.counts()[0, 0, 0] == 5

    def test_shards_bounded_by_pool_size(self) -> None:
        hist = PhotonHistogram(domain_size=2.0, cell_number=2)
        positions = np.zeros((64, 3))
        with EmissionCollector(max_workers=2, chunk_size=1) as collector:
            assert collector.count_into(hist, positions, np.ones((64, 1))) == 64
        assert 1 <= hist.shard_count <= 2


def test_close_is_idempotent() -> None:
    collector = EmissionCollector(max_workers=2)
    collector.close()
    collector.close()
