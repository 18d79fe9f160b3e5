"""Photon accounting for simulations of atoms diffusing during imaging."""

__version__ = "0.1.0"
