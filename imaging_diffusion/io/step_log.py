"""Parquet persistence for the per-step run log."""

from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from imaging_diffusion.config.constants import STEP_LOG_FLUSH_THRESHOLD
from imaging_diffusion.io.schemas import STEP_LOG_SCHEMA


class StepLogWriter:
    """Buffers step rows column-wise and writes them to one Parquet file in chunks.

    The file is opened on the first non-empty flush, so a run that logs no
    steps leaves no file behind.
    """

    def __init__(self, path: Path, flush_threshold: int = STEP_LOG_FLUSH_THRESHOLD) -> None:
        if flush_threshold < 1:
            raise ValueError("flush_threshold must be >= 1")
        self.path = Path(path)
        self.flush_threshold = flush_threshold
        self._columns: dict[str, list[int | float]] = {name: [] for name in STEP_LOG_SCHEMA.names}
        self._writer: pq.ParquetWriter | None = None
        self.rows_written = 0

    def __enter__(self) -> StepLogWriter:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    @property
    def pending(self) -> int:
        return len(self._columns["step"])

    def append(self, row: dict[str, int | float]) -> None:
        for name, values in self._columns.items():
            values.append(row[name])
        if self.pending >= self.flush_threshold:
            self.flush()

    def flush(self) -> None:
        pending = self.pending
        if pending == 0:
            return
        if self._writer is None:
            self._writer = pq.ParquetWriter(self.path, STEP_LOG_SCHEMA)
        self._writer.write_table(pa.Table.from_pydict(self._columns, schema=STEP_LOG_SCHEMA))
        for values in self._columns.values():
            values.clear()
        self.rows_written += pending

    def close(self) -> None:
        self.flush()
        if self._writer is not None:
            self._writer.close()
            self._writer = None
