"""audiodiag CLI - channel topology and noise-floor modulation diagnostics."""
from __future__ import annotations
import argparse
import asyncio
import json
import logging
import platform
import sys
from pathlib import Path

from audiodiag.version import __version__
from audiodiag.analysis.noise_modulation import (
    analyze_noise_modulation,
    quick_check_noise_modulation,
)
from audiodiag.analysis.topology import detect_topology, quick_check_topology
from audiodiag.io.extract import ExtractionError
from audiodiag.reporting.report import build_diagnostics_report_dict
from audiodiag.thresholds.loader import build_threshold_config, load_threshold_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_ARGS = 2
EXIT_DECODE_ERROR = 3
EXIT_CONFIG_ERROR = 4
EXIT_INTERNAL_ERROR = 5


class ConfigError(ValueError):
    """Threshold configuration could not be loaded."""


def _build_engine_meta() -> dict:
    return {
        "name": "audiodiag",
        "version": __version__,
        "python": platform.python_version(),
    }


def _build_input_meta(audio_path: str, mode: str) -> dict:
    path = Path(audio_path)
    return {"path": str(path), "file_name": path.name, "mode": mode}


def _load_thresholds(path: str | None) -> dict:
    if not path:
        return build_threshold_config(None)
    try:
        return load_threshold_config(path)
    except FileNotFoundError as e:
        raise ConfigError(f"Threshold file not found - {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid threshold JSON - {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid thresholds - {e}") from e


def _emit(report: dict, out: str | None) -> None:
    output_json = json.dumps(report, indent=2)
    if out:
        Path(out).write_text(output_json, encoding="utf-8")
        print(f"Report written to: {out}", file=sys.stderr)
    else:
        print(output_json)


def _run(args, build) -> int:
    """Shared error handling for every subcommand."""
    try:
        thresholds = _load_thresholds(args.thresholds)
        report = asyncio.run(build(args, thresholds))
        _emit(report, args.out)
        return EXIT_OK
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR
    except Exception as e:
        logger.debug("internal error", exc_info=True)
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR


async def _topology_report(args, thresholds: dict) -> dict:
    if args.quick:
        result = await quick_check_topology(args.audio_path)
    else:
        result = await detect_topology(args.audio_path, config=thresholds["topology"])
    return build_diagnostics_report_dict(
        engine=_build_engine_meta(),
        input_meta=_build_input_meta(args.audio_path, "quick" if args.quick else "full"),
        topology=result,
    )


async def _noise_report(args, thresholds: dict) -> dict:
    check = quick_check_noise_modulation if args.quick else analyze_noise_modulation
    result = await check(args.audio_path, config=thresholds["noise_modulation"])
    return build_diagnostics_report_dict(
        engine=_build_engine_meta(),
        input_meta=_build_input_meta(args.audio_path, "quick" if args.quick else "full"),
        noise_modulation=result,
    )


async def _full_report(args, thresholds: dict) -> dict:
    topology = await detect_topology(args.audio_path, config=thresholds["topology"])
    noise = await analyze_noise_modulation(
        args.audio_path, config=thresholds["noise_modulation"]
    )
    return build_diagnostics_report_dict(
        engine=_build_engine_meta(),
        input_meta=_build_input_meta(args.audio_path, "full"),
        topology=topology,
        noise_modulation=noise,
    )


def cmd_topology(args) -> int:
    """Handle topology command."""
    return _run(args, _topology_report)


def cmd_noise(args) -> int:
    """Handle noise command."""
    return _run(args, _noise_report)


def cmd_analyze(args) -> int:
    """Handle analyze command."""
    return _run(args, _full_report)


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "audio_path",
        help="Path to audio file (WAV, FLAC, AIFF; others via ffmpeg)"
    )
    p.add_argument(
        "--thresholds", "-t",
        help="Path to threshold overrides JSON"
    )
    p.add_argument(
        "--out", "-o",
        help="Output path for report JSON"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audiodiag",
        description="audiodiag - channel topology and noise-floor modulation diagnostics"
    )
    parser.add_argument(
        "--version", action="version",
        version=f"audiodiag {__version__}"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    topology_parser = subparsers.add_parser(
        "topology",
        help="Classify channel topology"
    )
    _add_common_arguments(topology_parser)
    topology_parser.add_argument(
        "--quick",
        action="store_true",
        help="Header-only check from the channel count; probe errors yield UNKNOWN"
    )
    topology_parser.set_defaults(func=cmd_topology)

    noise_parser = subparsers.add_parser(
        "noise",
        help="Classify noise-floor modulation"
    )
    _add_common_arguments(noise_parser)
    noise_parser.add_argument(
        "--quick",
        action="store_true",
        help="Single decode pass; decode errors yield a low-confidence CLEAN result"
    )
    noise_parser.set_defaults(func=cmd_noise)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run topology and noise modulation analysis"
    )
    _add_common_arguments(analyze_parser)
    analyze_parser.set_defaults(func=cmd_analyze)
    return parser


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(EXIT_BAD_ARGS)


if __name__ == "__main__":
    main()
