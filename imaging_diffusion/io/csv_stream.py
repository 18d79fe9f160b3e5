"""Plain-text photon stream: one ``px,py,pz,dx,dy,dz`` line per emission."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import numpy as np

from imaging_diffusion.photons.emission import EmissionBatch

logger = logging.getLogger(__name__)


class CsvPhotonWriter:
    """Streams emission batches to a CSV file through a buffered handle."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._handle = self.path.open("w", newline="")
        self._writer = csv.writer(self._handle)
        self.rows_written = 0

    def __enter__(self) -> CsvPhotonWriter:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write_batch(self, batch: EmissionBatch) -> int:
        if self.closed:
            raise ValueError(f"CSV photon stream {self.path} is closed")
        if len(batch) == 0:
            return 0
        rows = np.hstack((batch.positions, batch.directions)).tolist()
        self._writer.writerows(rows)
        self.rows_written += len(rows)
        return len(rows)

    def close(self) -> None:
        if not self.closed:
            self._handle.close()
            logger.info("Wrote %d photons to %s", self.rows_written, self.path)
