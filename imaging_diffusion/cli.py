"""CLI entrypoint for imaging-diffusion runs."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from imaging_diffusion.config.constants import (
    DEFAULT_CELL_NUMBER,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOMAIN_SIZE,
    DEFAULT_EXPOSURE,
    DEFAULT_N_ATOMS,
    DEFAULT_N_CHANNELS,
    DEFAULT_POSITION_SIGMA,
    DEFAULT_SCATTERING_RATE,
    DEFAULT_TIMESTEP,
    DEFAULT_VELOCITY_SIGMA,
)
from imaging_diffusion.config.types import (
    CloudConfig,
    HistogramConfig,
    ImagingConfig,
    OutputMode,
    ScatteringConfig,
)
from imaging_diffusion.io.paths import plots_dir
from imaging_diffusion.simulation.engine import run_imaging

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_mode(raw_mode: str) -> OutputMode:
    try:
        return OutputMode(raw_mode)
    except ValueError as exc:
        choices = ", ".join(mode.value for mode in OutputMode)
        raise ValueError(f"mode must be one of: {choices}") from exc


def _coerce_bool(raw: object, key: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"config key {key!r} must be a boolean, got {raw!r}")
    return raw


def _coerce_int(raw: object, key: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"config key {key!r} must be an integer, got {raw!r}")
    return raw


def _coerce_float(raw: object, key: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"config key {key!r} must be a number, got {raw!r}")
    return float(raw)


def _coerce_str(raw: object, key: str) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"config key {key!r} must be a string, got {raw!r}")
    return raw


class _Options:
    """Resolves one option: CLI flag, else config-file key, else built-in default."""

    def __init__(self, args: argparse.Namespace, file_cfg: dict[str, object]) -> None:
        self.args = args
        self.file_cfg = file_cfg

    def get(
        self,
        key: str,
        default: T | None,
        coerce: Callable[[object, str], T],
    ) -> T | None:
        raw = getattr(self.args, key)
        if raw is None:
            raw = self.file_cfg.get(key, default)
        return None if raw is None else coerce(raw, key)


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Simulate photon emission of atoms diffusing during imaging"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file of option defaults (CLI flags take precedence)",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default=None,
        help="Output mode: " + ", ".join(mode.value for mode in OutputMode),
    )
    step_group = parser.add_mutually_exclusive_group()
    step_group.add_argument("--steps", type=int, default=None)
    step_group.add_argument("--exposure", type=float, default=None, help="Exposure in seconds")
    parser.add_argument("--dt", type=float, default=None, help="Timestep in seconds")
    parser.add_argument("--n-atoms", type=int, default=None)
    parser.add_argument("--position-sigma", type=float, default=None)
    parser.add_argument("--velocity-sigma", type=float, default=None)
    parser.add_argument("--scattering-rate", type=float, default=None)
    parser.add_argument("--channels", type=int, default=None)
    parser.add_argument("--fluctuations", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--domain-size", type=float, default=None)
    parser.add_argument("--cell-number", type=int, default=None)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--chunk-size", type=int, default=None)
    parser.add_argument("--step-log", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--render", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def _build_config(args: argparse.Namespace, file_cfg: dict[str, object]) -> ImagingConfig:
    opts = _Options(args, file_cfg)
    common = {
        "dt": opts.get("dt", DEFAULT_TIMESTEP, _coerce_float),
        "mode": _parse_mode(opts.get("mode", OutputMode.EVENT_STORE.value, _coerce_str)),
        "out_dir": Path(opts.get("out_dir", "data", _coerce_str)),
        "seed": opts.get("seed", None, _coerce_int),
        "max_workers": opts.get("workers", None, _coerce_int),
        "chunk_size": opts.get("chunk_size", DEFAULT_CHUNK_SIZE, _coerce_int),
        "histogram": HistogramConfig(
            domain_size=opts.get("domain_size", DEFAULT_DOMAIN_SIZE, _coerce_float),
            cell_number=opts.get("cell_number", DEFAULT_CELL_NUMBER, _coerce_int),
        ),
        "scattering": ScatteringConfig(
            rate=opts.get("scattering_rate", DEFAULT_SCATTERING_RATE, _coerce_float),
            n_channels=opts.get("channels", DEFAULT_N_CHANNELS, _coerce_int),
            fluctuations=opts.get("fluctuations", True, _coerce_bool),
        ),
        "cloud": CloudConfig(
            n_atoms=opts.get("n_atoms", DEFAULT_N_ATOMS, _coerce_int),
            position_sigma=opts.get("position_sigma", DEFAULT_POSITION_SIGMA, _coerce_float),
            velocity_sigma=opts.get("velocity_sigma", DEFAULT_VELOCITY_SIGMA, _coerce_float),
        ),
        "write_step_log": opts.get("step_log", True, _coerce_bool),
    }
    # An explicit step count wins over an exposure; either may come from the file.
    if args.steps is not None or (args.exposure is None and "steps" in file_cfg):
        return ImagingConfig(steps=opts.get("steps", 1, _coerce_int), **common)
    exposure = opts.get("exposure", DEFAULT_EXPOSURE, _coerce_float)
    return ImagingConfig.from_exposure(exposure, **common)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for an imaging run.

    Supports ``--config path/to/config.json`` for reproducibility. CLI
    arguments override config-file values; config-file values override
    built-in defaults.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")
        if not isinstance(file_cfg, dict):
            parser.error(f"Config file must hold a JSON object: {args.config}")

    try:
        config = _build_config(args, file_cfg)
        render = _Options(args, file_cfg).get("render", False, _coerce_bool)
    except ValueError as exc:
        parser.error(str(exc))

    result = run_imaging(config)

    plots: list[str] = []
    if render:
        from imaging_diffusion.viz.render import (
            render_emission_scatter,
            render_histogram_projection,
        )

        if config.mode == OutputMode.EVENT_STORE:
            plots.append(
                str(
                    render_emission_scatter(
                        result.output_path, plots_dir(config.out_dir) / "emission_scatter.png"
                    )
                )
            )
        elif config.mode == OutputMode.HISTOGRAM:
            plots.append(
                str(
                    render_histogram_projection(
                        result.output_path,
                        cell_number=config.histogram.cell_number,
                        domain_size=config.histogram.domain_size,
                        output_path=plots_dir(config.out_dir) / "histogram_projection.png",
                    )
                )
            )
        else:
            logger.warning("Rendering is not available for mode %s", config.mode.value)

    summary = {
        "mode": result.mode.value,
        "steps": result.steps,
        "n_atoms": result.n_atoms,
        "total_photons": result.total_photons,
        "recorded_photons": result.recorded_photons,
        "output_path": str(result.output_path),
        "step_log_path": None if result.step_log_path is None else str(result.step_log_path),
        "plots": plots,
    }
    print(json.dumps(summary, ensure_ascii=False))


if __name__ == "__main__":
    main()
