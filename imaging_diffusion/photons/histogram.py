"""Spatial histogram of photon emission positions.

The histogram is a cube of ``cell_number**3`` cells, centered at the origin.
It can be counted into from many threads at once through a shared reference:
each thread increments its own shard, registered once on first use, and reads
sum all shards. No lock is taken on the counting path and no update is lost.

Cell values are unsigned 32-bit and saturate at ``HISTOGRAM_COUNTER_MAX``.
Shards are 64-bit, so saturation is applied once, when shards are summed.

Memory grows with the number of counting threads: each shard holds
``8 * cell_number**3`` bytes (8 MB at the default ``cell_number=100``, about
1 GB at 500). The collector's pool size bounds the footprint; run wide grids
with a small ``EmissionCollector(max_workers=...)``.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Sequence
from pathlib import Path

import numpy as np

from imaging_diffusion.config.constants import HISTOGRAM_COUNTER_MAX
from imaging_diffusion.config.types import HistogramConfig

logger = logging.getLogger(__name__)


class PhotonHistogram:
    """Counts photon emission positions into a fixed 3D grid."""

    def __init__(self, domain_size: float, cell_number: int) -> None:
        """Create an empty histogram.

        Args:
            domain_size: width of the cubic domain in m.
            cell_number: number of cells along one axis.
        """
        config = HistogramConfig(domain_size=domain_size, cell_number=cell_number)
        self.domain_size = config.domain_size
        self.cell_number = config.cell_number
        self.cell_size = config.cell_size
        self._offset = self.cell_number // 2
        self._n_cells = self.cell_number**3
        self._shards: list[np.ndarray] = []
        self._shards_lock = threading.Lock()
        self._local = threading.local()

    @classmethod
    def from_config(cls, config: HistogramConfig) -> PhotonHistogram:
        return cls(domain_size=config.domain_size, cell_number=config.cell_number)

    def _shard(self) -> np.ndarray:
        shard = getattr(self._local, "shard", None)
        if shard is None:
            shard = np.zeros(self._n_cells, dtype=np.uint64)
            with self._shards_lock:
                self._shards.append(shard)
            self._local.shard = shard
        return shard

    @property
    def shard_count(self) -> int:
        """Number of threads that have counted into this histogram."""
        with self._shards_lock:
            return len(self._shards)

    # -- indexing ---------------------------------------------------------

    def cell_index(self, position: Sequence[float]) -> int | None:
        """Flat ``(z, y, x)`` row-major index of the cell holding ``position``, or None."""
        n = self.cell_number
        axes: list[int] = []
        for coordinate in position:
            scaled = float(coordinate) / self.cell_size
            if not math.isfinite(scaled):
                return None
            index = math.floor(scaled) + self._offset
            if index < 0 or index >= n:
                return None
            axes.append(index)
        x, y, z = axes
        return (z * n + y) * n + x

    def cell_indices(self, positions: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`cell_index`; out-of-domain rows map to -1."""
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        n = self.cell_number
        with np.errstate(invalid="ignore", over="ignore"):
            scaled = np.floor(positions / self.cell_size) + self._offset
            in_domain = np.all(np.isfinite(scaled) & (scaled >= 0) & (scaled < n), axis=1)
        axes = np.where(in_domain[:, None], scaled, 0).astype(np.int64)
        flat = (axes[:, 2] * n + axes[:, 1]) * n + axes[:, 0]
        return np.where(in_domain, flat, -1)

    # -- counting ---------------------------------------------------------

    def count(self, position: Sequence[float]) -> None:
        """Count one emission; out-of-domain positions are dropped."""
        index = self.cell_index(position)
        if index is not None:
            self._shard()[index] += 1

    def count_many(self, positions: np.ndarray) -> int:
        """Count every row of an ``(k, 3)`` array; returns how many were in the domain."""
        indices = self.cell_indices(positions)
        indices = indices[indices >= 0]
        if indices.size:
            np.add.at(self._shard(), indices, 1)
        return int(indices.size)

    # -- reading ----------------------------------------------------------

    def counts(self) -> np.ndarray:
        """Saturated uint32 counts, shape ``(n, n, n)`` indexed ``[z, y, x]``."""
        with self._shards_lock:
            shards = list(self._shards)
        total = np.zeros(self._n_cells, dtype=np.uint64)
        for shard in shards:
            total += shard
        n = self.cell_number
        return np.minimum(total, HISTOGRAM_COUNTER_MAX).astype(np.uint32).reshape(n, n, n)

    def total(self) -> int:
        return int(self.counts().sum(dtype=np.uint64))

    def flush(self, path: Path | str) -> Path:
        """Write all cells, z-major, as one comma-separated line, overwriting ``path``."""
        path = Path(path)
        values = self.counts().ravel()
        path.write_text(",".join(str(v) for v in values.tolist()))
        logger.info("Wrote %d histogram cells (%d photons) to %s", values.size, values.sum(), path)
        return path
