"""Simulation layer: per-step photon pipeline and the imaging run driver."""

from imaging_diffusion.simulation.engine import ImagingResult, run_imaging
from imaging_diffusion.simulation.pipeline import ImagingPipeline, StepRecord

__all__ = [
    "ImagingPipeline",
    "ImagingResult",
    "StepRecord",
    "run_imaging",
]
