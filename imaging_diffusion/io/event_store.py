"""HDF5 event store: a growing photon sequence plus a write-once atom table.

The file holds two datasets with different write capabilities:

* ``photons`` is an :class:`AppendableSequence`: resizable along its only
  axis, extended once per step by resizing and writing the new tail.
* ``atoms`` is a :class:`CreateOnceTable`: created from a complete array in
  a single call; a second creation is a caller error.

Every append is flushed to disk, so the store is durable after each step and
needs no finalisation beyond closing the file.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import h5py
import numpy as np
from numpy.lib.recfunctions import unstructured_to_structured

from imaging_diffusion.config.constants import (
    ATOMS_DATASET,
    EVENT_STORE_SCHEMA_VERSION,
    PHOTON_CHUNK_ROWS,
    PHOTONS_DATASET,
)
from imaging_diffusion.io.schemas import ATOM_DTYPE, PHOTON_DTYPE
from imaging_diffusion.photons.emission import EmissionBatch, EmissionEvent

logger = logging.getLogger(__name__)


class EventStoreError(RuntimeError):
    """The event store could not be created, extended or written."""


class InitialStateAlreadyRecordedError(EventStoreError):
    """The write-once initial-state table was written a second time."""


class AppendableSequence:
    """A one-dimensional, unlimited HDF5 dataset grown by whole batches."""

    def __init__(self, dataset: h5py.Dataset) -> None:
        self.dataset = dataset

    @classmethod
    def create(
        cls, parent: h5py.Group, name: str, dtype: np.dtype, chunk_rows: int = PHOTON_CHUNK_ROWS
    ) -> AppendableSequence:
        dataset = parent.create_dataset(
            name, shape=(0,), maxshape=(None,), dtype=dtype, chunks=(chunk_rows,)
        )
        return cls(dataset)

    def __len__(self) -> int:
        return int(self.dataset.shape[0])

    def append(self, records: np.ndarray) -> int:
        """Extend by ``len(records)`` and write them into the new tail."""
        n = len(records)
        if n == 0:
            return 0
        old_length = len(self)
        self.dataset.resize((old_length + n,))
        self.dataset[old_length : old_length + n] = records
        return n


def as_table_records(
    records: np.ndarray | Sequence[Sequence[float]], dtype: np.dtype
) -> np.ndarray:
    """Coerce ``records`` to a 1-D structured array of ``dtype``.

    Accepts a structured array with the same field names, or a 2-D array with
    one column per field in field order.
    """
    array = np.asarray(records)
    if array.size == 0:
        return np.zeros(0, dtype=dtype)
    names = dtype.names
    if array.dtype.names is not None:
        if array.dtype.names != names:
            raise ValueError(f"records have fields {array.dtype.names}, expected {names}")
        return array.astype(dtype, copy=False).reshape(-1)
    if array.ndim == 2 and array.shape[1] == len(names):
        return unstructured_to_structured(array.astype(np.float64, copy=False), dtype=dtype)
    raise ValueError(
        f"records must be a structured array or have shape (n, {len(names)}), got {array.shape}"
    )


class CreateOnceTable:
    """A dataset that is written exactly once, in full."""

    def __init__(self, parent: h5py.Group, name: str, dtype: np.dtype) -> None:
        self.parent = parent
        self.name = name
        self.dtype = dtype

    @property
    def exists(self) -> bool:
        return self.name in self.parent

    def create(self, records: np.ndarray) -> int:
        if self.exists:
            raise InitialStateAlreadyRecordedError(
                f"dataset {self.name!r} already exists in {self.parent.file.filename}; "
                "it can only be created once"
            )
        data = as_table_records(records, self.dtype)
        self.parent.create_dataset(self.name, data=data)
        return len(data)


class PhotonEventStore:
    """Durable, append-only store of photon emissions for one run."""

    def __init__(self, path: Path | str, chunk_rows: int = PHOTON_CHUNK_ROWS) -> None:
        self.path = Path(path)
        try:
            self._file = h5py.File(self.path, "w")
        except OSError as exc:
            raise EventStoreError(f"could not create event store {self.path}: {exc}") from exc
        try:
            self._file.attrs["origin"] = "imaging_diffusion"
            self._file.attrs["schema_version"] = EVENT_STORE_SCHEMA_VERSION
            self._photons = AppendableSequence.create(
                self._file, PHOTONS_DATASET, PHOTON_DTYPE, chunk_rows=chunk_rows
            )
            self._atoms = CreateOnceTable(self._file, ATOMS_DATASET, ATOM_DTYPE)
        except (OSError, ValueError) as exc:
            self._file.close()
            raise EventStoreError(f"could not create datasets in {self.path}: {exc}") from exc
        logger.info("Created event store %s", self.path)

    def __enter__(self) -> PhotonEventStore:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return not bool(self._file)

    def _require_open(self) -> None:
        if self.closed:
            raise EventStoreError(f"event store {self.path} is closed")

    @property
    def photon_count(self) -> int:
        self._require_open()
        return len(self._photons)

    @property
    def initial_state_recorded(self) -> bool:
        self._require_open()
        return self._atoms.exists

    def append_batch(self, events: EmissionBatch | Sequence[EmissionEvent]) -> int:
        """Append one step's emissions to the ``photons`` dataset; returns records written."""
        self._require_open()
        batch = events if isinstance(events, EmissionBatch) else EmissionBatch.from_events(events)
        if len(batch) == 0:
            return 0
        try:
            written = self._photons.append(batch.to_records())
            self._file.flush()
        except (OSError, ValueError) as exc:
            raise EventStoreError(
                f"could not append {len(batch)} photons to {self.path}: {exc}"
            ) from exc
        return written

    def record_initial_state(self, records: np.ndarray) -> int:
        """Create the ``atoms`` table from ``records``; empty input writes nothing.

        ``records`` is an ``ATOM_DTYPE`` array or an ``(n, 6)`` float array
        ordered ``x, y, z, vx, vy, vz``; anything else raises ``ValueError``.
        """
        self._require_open()
        records = as_table_records(records, ATOM_DTYPE)
        if len(records) == 0:
            return 0
        try:
            written = self._atoms.create(records)
            self._file.flush()
        except InitialStateAlreadyRecordedError:
            raise
        except (OSError, ValueError, TypeError) as exc:
            raise EventStoreError(
                f"could not write {len(records)} initial atom records to {self.path}: {exc}"
            ) from exc
        return written

    def close(self) -> None:
        if not self.closed:
            self._file.close()
            logger.info("Closed event store %s", self.path)
