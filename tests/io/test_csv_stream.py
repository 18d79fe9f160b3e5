"""Tests for imaging_diffusion.io.csv_stream."""

from __future__ import annotations

import csv
from pathlib import Path

import numpy as np
import pytest

from imaging_diffusion.io.csv_stream import CsvPhotonWriter
from imaging_diffusion.photons.emission import EmissionBatch


def _batch(n: int) -> EmissionBatch:
    positions = np.arange(n * 3, dtype=float).reshape(n, 3)
    directions = np.tile([0.0, 0.0, 1.0], (n, 1))
    return EmissionBatch(positions=positions, directions=directions)


def test_one_line_per_emission(tmp_path: Path) -> None:
    path = tmp_path / "photons.csv"
    with CsvPhotonWriter(path) as writer:
        assert writer.write_batch(_batch(2)) == 2
        assert writer.write_batch(EmissionBatch.empty()) == 0
        assert writer.write_batch(_batch(1)) == 1
        assert writer.rows_written == 3

    with path.open(newline="") as handle:
        rows = [[float(v) for v in row] for row in csv.reader(handle)]
    assert rows == [
        [0.0, 1.0, 2.0, 0.0, 0.0, 1.0],
        [3.0, 4.0, 5.0, 0.0, 0.0, 1.0],
        [0.0, 1.0, 2.0, 0.0, 0.0, 1.0],
    ]


def test_write_after_close_raises(tmp_path: Path) -> None:
    writer = CsvPhotonWriter(tmp_path / "photons.csv")
    writer.close()
    writer.close()
    assert writer.closed
    with pytest.raises(ValueError, match="closed"):
        writer.write_batch(_batch(1))
