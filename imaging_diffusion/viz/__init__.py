"""Visualization layer: emission scatter plots and histogram projections."""

from imaging_diffusion.viz.render import render_emission_scatter, render_histogram_projection

__all__ = ["render_emission_scatter", "render_histogram_projection"]
