"""Tests for imaging_diffusion.photons.snapshot."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from imaging_diffusion.domain.atoms import AtomEnsemble
from imaging_diffusion.io.event_store import InitialStateAlreadyRecordedError, PhotonEventStore
from imaging_diffusion.io.readers import read_initial_atoms
from imaging_diffusion.io.schemas import ATOM_FIELDS
from imaging_diffusion.photons.snapshot import InitialSnapshotRecorder


class _ListSink:
    def __init__(self) -> None:
        self.calls: list[np.ndarray] = []

    def record_initial_state(self, records: np.ndarray) -> int:
        self.calls.append(records)
        return len(records)


def _atoms(newly_created: list[bool]) -> AtomEnsemble:
    n = len(newly_created)
    return AtomEnsemble(
        positions=np.arange(n * 3, dtype=float).reshape(n, 3),
        velocities=-np.arange(n * 3, dtype=float).reshape(n, 3),
        scattered=np.zeros((n, 1)),
        newly_created=np.array(newly_created, dtype=bool),
    )


class TestInitialSnapshotRecorder:
    def test_records_only_newly_created_atoms(self) -> None:
        sink = _ListSink()
        written = InitialSnapshotRecorder(sink).record(_atoms([True, False, True]))
        assert written == 2
        (records,) = sink.calls
        assert records.dtype.names == ATOM_FIELDS
        assert records[0].tolist() == (0.0, 1.0, 2.0, -0.0, -1.0, -2.0)
        assert records[1].tolist() == (6.0, 7.0, 8.0, -6.0, -7.0, -8.0)

    def test_no_new_atoms_writes_nothing(self) -> None:
        sink = _ListSink()
        assert InitialSnapshotRecorder(sink).record(_atoms([False, False])) == 0
        assert sink.calls == []

    def test_each_atom_recorded_once_across_steps(self, tmp_path: Path) -> None:
        atoms = _atoms([True, True, True])
        with PhotonEventStore(tmp_path / "photons.h5") as store:
            recorder = InitialSnapshotRecorder(store)
            for _ in range(4):
                recorder.record(atoms)
                atoms.maintain()
        records = read_initial_atoms(tmp_path / "photons.h5")
        assert records is not None
        assert len(records) == 3

    def test_second_cohort_fails_loudly(self, tmp_path: Path) -> None:
        with PhotonEventStore(tmp_path / "photons.h5") as store:
            recorder = InitialSnapshotRecorder(store)
            recorder.record(_atoms([True]))
            with pytest.raises(InitialStateAlreadyRecordedError):
                recorder.record(_atoms([True]))
