"""Photon accounting: emission sampling, histogramming and parallel collection."""

from imaging_diffusion.photons.collector import EmissionCollector, chunk_slices
from imaging_diffusion.photons.emission import (
    EmissionBatch,
    EmissionEvent,
    reseed,
    sample_batch,
    sample_directions,
    sample_emissions,
    scatter_count,
    scatter_counts,
    thread_rng,
)
from imaging_diffusion.photons.histogram import PhotonHistogram
from imaging_diffusion.photons.snapshot import InitialSnapshotRecorder

__all__ = [
    "EmissionBatch",
    "EmissionCollector",
    "EmissionEvent",
    "InitialSnapshotRecorder",
    "PhotonHistogram",
    "chunk_slices",
    "reseed",
    "sample_batch",
    "sample_directions",
    "sample_emissions",
    "scatter_count",
    "scatter_counts",
    "thread_rng",
]
