"""Per-step photon pipeline: one output sink, selected once per run."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path

import numpy as np

from imaging_diffusion.config.types import HistogramConfig, OutputMode
from imaging_diffusion.domain.atoms import AtomEnsemble
from imaging_diffusion.io.csv_stream import CsvPhotonWriter
from imaging_diffusion.io.event_store import PhotonEventStore
from imaging_diffusion.io.paths import csv_stream_path, event_store_path, histogram_path
from imaging_diffusion.photons.collector import EmissionCollector
from imaging_diffusion.photons.emission import scatter_counts
from imaging_diffusion.photons.histogram import PhotonHistogram
from imaging_diffusion.photons.snapshot import InitialSnapshotRecorder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepRecord:
    """What one step contributed; one row of the step log."""

    step: int
    time: float
    n_atoms: int
    n_emitters: int
    n_photons: int
    n_new_atoms: int
    n_clipped: int

    def as_row(self) -> dict[str, int | float]:
        return asdict(self)


class ImagingPipeline:
    """Routes every step's emissions to the sink of ``mode``.

    * ``HISTOGRAM``: positions are counted into a :class:`PhotonHistogram`,
      flushed to text by :meth:`finish`.
    * ``EVENT_STORE``: each step's batch is appended to a
      :class:`PhotonEventStore`, and newly created atoms are recorded once.
    * ``CSV_STREAM``: each step's batch is written as CSV lines.
    """

    def __init__(
        self,
        mode: OutputMode,
        out_dir: Path,
        collector: EmissionCollector,
        histogram_config: HistogramConfig | None = None,
    ) -> None:
        self.mode = mode
        self.out_dir = Path(out_dir)
        self.collector = collector
        self.out_dir.mkdir(parents=True, exist_ok=True)

        self.histogram: PhotonHistogram | None = None
        self.store: PhotonEventStore | None = None
        self.recorder: InitialSnapshotRecorder | None = None
        self.stream: CsvPhotonWriter | None = None

        if mode == OutputMode.HISTOGRAM:
            self.histogram = PhotonHistogram.from_config(histogram_config or HistogramConfig())
            self.output_path = histogram_path(self.out_dir)
        elif mode == OutputMode.EVENT_STORE:
            self.output_path = event_store_path(self.out_dir)
            self.store = PhotonEventStore(self.output_path)
            self.recorder = InitialSnapshotRecorder(self.store)
        elif mode == OutputMode.CSV_STREAM:
            self.output_path = csv_stream_path(self.out_dir)
            self.stream = CsvPhotonWriter(self.output_path)
        else:
            raise ValueError(f"Unsupported output mode: {mode!r}")
        self._finished = False

    def __enter__(self) -> ImagingPipeline:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def process_step(self, atoms: AtomEnsemble, step: int, time: float) -> StepRecord:
        """Account for the photons scattered by ``atoms`` during one step."""
        if self._finished:
            raise RuntimeError("pipeline already finished")
        counts = scatter_counts(atoms.scattered)
        n_new = (
            self.recorder.record(atoms)
            if self.recorder is not None
            else int(np.count_nonzero(atoms.newly_created))
        )

        n_photons = int(counts.sum())
        n_clipped = 0
        if self.histogram is not None:
            counted = self.collector.count_into(self.histogram, atoms.positions, atoms.scattered)
            n_clipped = n_photons - counted
        else:
            batch = self.collector.collect(atoms.positions, atoms.scattered)
            if self.store is not None:
                self.store.append_batch(batch)
            elif self.stream is not None:
                self.stream.write_batch(batch)

        record = StepRecord(
            step=step,
            time=time,
            n_atoms=len(atoms),
            n_emitters=int(np.count_nonzero(counts)),
            n_photons=n_photons,
            n_new_atoms=n_new,
            n_clipped=n_clipped,
        )
        logger.debug("Step %d: %d photons from %d emitters", step, n_photons, record.n_emitters)
        return record

    def finish(self) -> Path:
        """Flush the histogram (histogram mode) and close every sink."""
        if not self._finished:
            if self.histogram is not None:
                self.histogram.flush(self.output_path)
            self._finished = True
        self.close()
        return self.output_path

    def close(self) -> None:
        if self.store is not None:
            self.store.close()
        if self.stream is not None:
            self.stream.close()
