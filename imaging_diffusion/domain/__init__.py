"""Domain layer: atom ensemble and scattering sources."""

from imaging_diffusion.domain.atoms import AtomEnsemble
from imaging_diffusion.domain.scattering import (
    PoissonScatterSource,
    ScatterCountSource,
    apply_scattering,
)

__all__ = [
    "AtomEnsemble",
    "PoissonScatterSource",
    "ScatterCountSource",
    "apply_scattering",
]
