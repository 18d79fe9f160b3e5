"""Tests for imaging_diffusion.config.types validation."""

from __future__ import annotations

import math

import pytest

from imaging_diffusion.config import (
    CloudConfig,
    HistogramConfig,
    ImagingConfig,
    OutputMode,
    ScatteringConfig,
)


class TestHistogramConfig:
    def test_cell_size(self) -> None:
        assert HistogramConfig(domain_size=2.0, cell_number=4).cell_size == 0.5

    @pytest.mark.parametrize("domain_size", [0.0, -1.0, math.inf, math.nan])
    def test_rejects_bad_domain_size(self, domain_size: float) -> None:
        with pytest.raises(ValueError, match="domain_size"):
            HistogramConfig(domain_size=domain_size, cell_number=4)

    def test_rejects_zero_cells(self) -> None:
        with pytest.raises(ValueError, match="cell_number"):
            HistogramConfig(domain_size=1.0, cell_number=0)


class TestScatteringConfig:
    def test_rejects_negative_rate(self) -> None:
        with pytest.raises(ValueError, match="rate"):
            ScatteringConfig(rate=-1.0)

    def test_rejects_zero_channels(self) -> None:
        with pytest.raises(ValueError, match="n_channels"):
            ScatteringConfig(n_channels=0)


class TestCloudConfig:
    def test_empty_cloud_allowed(self) -> None:
        assert CloudConfig(n_atoms=0).n_atoms == 0

    def test_rejects_negative_sigma(self) -> None:
        with pytest.raises(ValueError, match="position_sigma"):
            CloudConfig(position_sigma=-1.0)


class TestImagingConfig:
    def test_default_covers_default_exposure(self) -> None:
        assert ImagingConfig().steps == 150

    def test_default_mode_is_event_store(self) -> None:
        assert ImagingConfig().mode == OutputMode.EVENT_STORE

    def test_rejects_zero_steps(self) -> None:
        with pytest.raises(ValueError, match="steps"):
            ImagingConfig(steps=0)

    def test_rejects_non_positive_dt(self) -> None:
        with pytest.raises(ValueError, match="dt"):
            ImagingConfig(dt=0.0)

    def test_rejects_zero_workers(self) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            ImagingConfig(max_workers=0)

    def test_from_exposure_rounds_up(self) -> None:
        assert ImagingConfig.from_exposure(15.0e-6, dt=0.1e-6).steps == 150
        assert ImagingConfig.from_exposure(1.05e-6, dt=0.1e-6).steps == 11

    def test_from_exposure_passes_through_fields(self) -> None:
        config = ImagingConfig.from_exposure(1.0e-6, dt=0.5e-6, mode=OutputMode.HISTOGRAM)
        assert config.steps == 2
        assert config.mode == OutputMode.HISTOGRAM

    def test_from_exposure_rejects_non_positive(self) -> None:
        with pytest.raises(ValueError, match="exposure"):
            ImagingConfig.from_exposure(0.0)

    def test_mode_values_round_trip(self) -> None:
        assert {OutputMode(m.value) for m in OutputMode} == set(OutputMode)
