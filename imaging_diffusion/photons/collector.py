"""Data-parallel fan-out of emission sampling over the atoms of one step."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

import numpy as np

from imaging_diffusion.config.constants import DEFAULT_CHUNK_SIZE
from imaging_diffusion.photons.emission import (
    EmissionBatch,
    sample_batch,
    scatter_counts,
    thread_rng,
)
from imaging_diffusion.photons.histogram import PhotonHistogram

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk_slices(n_items: int, chunk_size: int) -> list[slice]:
    """Contiguous slices covering ``range(n_items)``, each at most ``chunk_size`` long."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    return [
        slice(start, min(start + chunk_size, n_items)) for start in range(0, n_items, chunk_size)
    ]


class EmissionCollector:
    """Samples the photons of every atom in parallel chunks.

    Each chunk runs on a pool worker with that worker's own generator and
    produces a chunk-local result; results are combined after every chunk has
    finished. With ``max_workers=1`` chunks run inline on the calling thread.
    """

    def __init__(
        self, max_workers: int | None = None, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.chunk_size = chunk_size
        self._executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="emission")
            if max_workers != 1
            else None
        )

    def __enter__(self) -> EmissionCollector:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _map(self, fn: Callable[[slice], T], chunks: list[slice]) -> Iterable[T]:
        if self._executor is None or len(chunks) <= 1:
            return map(fn, chunks)
        return self._executor.map(fn, chunks)

    def collect(self, positions: np.ndarray, scattered: np.ndarray) -> EmissionBatch:
        """Emission events of every atom this step, flattened into one batch.

        Batch order follows chunk order; within a chunk, atom order.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        counts = scatter_counts(scattered)
        if counts.shape[0] != positions.shape[0]:
            raise ValueError(
                f"{counts.shape[0]} scatter counts for {positions.shape[0]} positions"
            )

        def sample_chunk(chunk: slice) -> EmissionBatch:
            return sample_batch(positions[chunk], counts[chunk], thread_rng())

        batch = EmissionBatch.concatenate(
            self._map(sample_chunk, chunk_slices(len(counts), self.chunk_size))
        )
        logger.debug("Collected %d photons from %d atoms", len(batch), len(counts))
        return batch

    def count_into(
        self, histogram: PhotonHistogram, positions: np.ndarray, scattered: np.ndarray
    ) -> int:
        """Count every emission position into ``histogram``; returns in-domain events.

        Directions carry no information for a histogram, so none are drawn.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        counts = scatter_counts(scattered)
        if counts.shape[0] != positions.shape[0]:
            raise ValueError(
                f"{counts.shape[0]} scatter counts for {positions.shape[0]} positions"
            )

        def count_chunk(chunk: slice) -> int:
            return histogram.count_many(np.repeat(positions[chunk], counts[chunk], axis=0))

        counted = sum(self._map(count_chunk, chunk_slices(len(counts), self.chunk_size)))
        logger.debug("Counted %d of %d photons into histogram", counted, int(counts.sum()))
        return counted
