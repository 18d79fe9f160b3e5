"""Records the initial position and velocity of atoms in the step they appear."""

from __future__ import annotations

import logging
from typing import Protocol

import numpy as np

from imaging_diffusion.domain.atoms import AtomEnsemble
from imaging_diffusion.io.schemas import ATOM_DTYPE, columns_to_records

logger = logging.getLogger(__name__)


class InitialStateSink(Protocol):
    def record_initial_state(self, records: np.ndarray) -> int: ...


class InitialSnapshotRecorder:
    """Writes one record per newly created atom.

    Relies on the ensemble clearing ``newly_created`` after each step, so every
    atom is recorded exactly once.
    """

    def __init__(self, sink: InitialStateSink) -> None:
        self.sink = sink

    @staticmethod
    def build_records(atoms: AtomEnsemble) -> np.ndarray:
        mask = atoms.newly_created
        return columns_to_records(atoms.positions[mask], atoms.velocities[mask], ATOM_DTYPE)

    def record(self, atoms: AtomEnsemble) -> int:
        """Hand this step's new atoms to the sink; steps without new atoms write nothing."""
        records = self.build_records(atoms)
        if len(records) == 0:
            return 0
        logger.info("Writing %d initial atom positions and velocities", len(records))
        return self.sink.record_initial_state(records)
