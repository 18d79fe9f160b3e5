"""Matplotlib-based rendering of photon emission outputs."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from imaging_diffusion.io.readers import load_histogram, photon_positions, read_photons

MICRONS_PER_METER = 1.0e6
AXIS_NAMES = ("x", "y", "z")


def render_emission_scatter(
    photons_path: Path,
    output_path: Path,
    max_points: int | None = 50_000,
    seed: int = 0,
) -> Path:
    """3D scatter plot of photon emission positions in micrometres.

    When the store holds more than ``max_points`` photons a uniform random
    subset is drawn.
    """
    positions = photon_positions(read_photons(photons_path)) * MICRONS_PER_METER
    if max_points is not None and positions.shape[0] > max_points:
        rng = np.random.default_rng(seed)
        positions = positions[rng.choice(positions.shape[0], size=max_points, replace=False)]

    fig = plt.figure(figsize=(6, 6), facecolor="white")
    ax = fig.add_subplot(projection="3d")
    ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2], s=1, marker=".")
    ax.view_init(elev=45, azim=-45)
    ax.set_xlabel(r"x ($\mu$m)")
    ax.set_ylabel(r"y ($\mu$m)")
    ax.set_zlabel(r"z ($\mu$m)")
    ax.set_title(f"{positions.shape[0]} emitted photons")
    fig.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=200)
    plt.close(fig)
    return output_path


def render_histogram_projection(
    histogram_path: Path,
    cell_number: int,
    domain_size: float,
    output_path: Path,
    axis: str = "z",
) -> Path:
    """Sum the histogram along ``axis`` and show the projected emission density."""
    if axis not in AXIS_NAMES:
        raise ValueError(f"axis must be one of {AXIS_NAMES}, got {axis!r}")
    cells = load_histogram(histogram_path, cell_number)  # [z, y, x]
    # Array axis 0 is z, 2 is x.
    projection = cells.sum(axis=2 - AXIS_NAMES.index(axis), dtype=np.uint64)
    remaining = [name for name in reversed(AXIS_NAMES) if name != axis]  # row, column axes

    half = domain_size / 2.0 * MICRONS_PER_METER
    fig, ax = plt.subplots(figsize=(5, 4.5), facecolor="white")
    image = ax.imshow(
        projection,
        origin="lower",
        extent=(-half, half, -half, half),
        cmap="viridis",
        interpolation="nearest",
    )
    ax.set_xlabel(rf"{remaining[1]} ($\mu$m)")
    ax.set_ylabel(rf"{remaining[0]} ($\mu$m)")
    ax.set_title(f"Emission density, summed along {axis}")
    fig.colorbar(image, ax=ax, label="photons")
    fig.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=200)
    plt.close(fig)
    return output_path
