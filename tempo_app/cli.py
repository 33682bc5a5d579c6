"""Command-line interface for the tempo mission tracker."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import structlog

from . import __version__
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .engine import MissionTracker
from .errors import (
    ConfigurationError,
    DataIntegrityError,
    SystemFailureError,
    UsageConflictError,
)
from .logging.config import configure_logging
from .state.models import Interval, MissionTotal, TransitionResult
from .utils.time import format_duration, format_timestamp

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE_CONFLICT = 1
EXIT_DATA_INTEGRITY = 2
EXIT_ENVIRONMENT = 3
EXIT_UNEXPECTED = 1

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_config(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Merge defaults, config file, environment and command-line flags, then validate."""
    loader = ConfigLoader.create(Path(args.config) if args.config else None, environ=environ)

    overrides: dict[str, Any] = {}
    if args.db:
        overrides["store"] = {"db_path": args.db}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}

    config = loader.merge_config(overrides, environ=environ)
    errors = ConfigValidator.validate_config(config)
    if errors:
        details = "; ".join(f"{err.field}: {err.message} (got: {err.value!r})" for err in errors)
        raise ConfigurationError(
            f"Invalid configuration: {details}",
            config_path=str(loader.config_path),
            errors=errors,
        )
    return config


def _emit(args: argparse.Namespace, text: str, payload: Any) -> None:
    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        print(text)


def _interval_payload(interval: Interval) -> dict[str, Any]:
    return {
        "mission": interval.mission,
        "start": format_timestamp(interval.start),
        "end": format_timestamp(interval.end) if interval.end is not None else None,
    }


def _transition_payload(result: TransitionResult) -> dict[str, Any]:
    return {
        "trigger": result.trigger.value,
        "mission": result.mission,
        "state": result.to_state.phase.value,
        "timestamp": format_timestamp(result.timestamp),
    }


def cmd_start(tracker: MissionTracker, args: argparse.Namespace, display: dict[str, Any]) -> int:
    result = tracker.start(args.name)
    _emit(args, f"New mission started: {result.mission}", _transition_payload(result))
    return EXIT_OK


def cmd_stop(tracker: MissionTracker, args: argparse.Namespace, display: dict[str, Any]) -> int:
    result = tracker.stop()
    elapsed = result.timestamp - result.from_state.start
    payload = _transition_payload(result)
    payload["elapsed_seconds"] = elapsed.total_seconds()
    _emit(
        args,
        f"Mission stopped: {result.mission} ({format_duration(elapsed, display['show_seconds'])})",
        payload,
    )
    return EXIT_OK


def cmd_resume(tracker: MissionTracker, args: argparse.Namespace, display: dict[str, Any]) -> int:
    result = tracker.resume()
    _emit(args, f"Mission resumed: {result.mission}", _transition_payload(result))
    return EXIT_OK


def cmd_status(tracker: MissionTracker, args: argparse.Namespace, display: dict[str, Any]) -> int:
    status = tracker.status()
    state = status.state
    payload = {
        "state": state.phase.value,
        "mission": state.mission,
        "start": format_timestamp(state.start) if state.start is not None else None,
        "elapsed_seconds": status.elapsed.total_seconds(),
    }
    if state.is_running:
        text = f"Active mission: {state.mission} -> {format_duration(status.elapsed, display['show_seconds'])}"
    else:
        text = "No active missions"
    _emit(args, text, payload)
    return EXIT_OK


def _render_totals(totals: list[MissionTotal], show_seconds: bool) -> str:
    if not totals:
        return "No missions recorded"
    width = max(len(total.mission) for total in totals)
    lines = []
    for total in totals:
        marker = "*" if total.running else " "
        plural = "interval" if total.interval_count == 1 else "intervals"
        lines.append(
            f"{marker} {total.mission:<{width}}  {format_duration(total.total, show_seconds):>12}"
            f"  ({total.interval_count} {plural})"
        )
    return "\n".join(lines)


def cmd_ls(tracker: MissionTracker, args: argparse.Namespace, display: dict[str, Any]) -> int:
    totals = tracker.list_missions()
    payload = [
        {
            "mission": total.mission,
            "total_seconds": total.total.total_seconds(),
            "interval_count": total.interval_count,
            "running": total.running,
        }
        for total in totals
    ]
    _emit(args, _render_totals(totals, display["show_seconds"]), payload)
    return EXIT_OK


def cmd_log(tracker: MissionTracker, args: argparse.Namespace, display: dict[str, Any]) -> int:
    intervals = tracker.history()
    lines = []
    for interval in intervals:
        if interval.is_open:
            lines.append(f"{interval.mission}: {format_timestamp(interval.start)} -> running")
        else:
            elapsed = format_duration(interval.elapsed(interval.end), display["show_seconds"])
            lines.append(
                f"{interval.mission}: {format_timestamp(interval.start)} -> "
                f"{format_timestamp(interval.end)} ({elapsed})"
            )
    _emit(args, "\n".join(lines) if lines else "No missions recorded",
          [_interval_payload(interval) for interval in intervals])
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tempo", description="Personal time tracking utility")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--db", help="Path to the interval log database")
    parser.add_argument("--log-level", type=str.upper, choices=_LOG_LEVELS, help="Logging level")
    parser.add_argument("--json", action="store_true", help="Print machine-readable output")

    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Start a new mission")
    start.add_argument("name", help="The name of the mission")
    start.set_defaults(func=cmd_start)

    sub.add_parser("stop", help="Stop the running mission").set_defaults(func=cmd_stop)
    sub.add_parser("resume", help="Resume the latest stopped mission").set_defaults(func=cmd_resume)
    sub.add_parser("status", help="Show the current mission status").set_defaults(func=cmd_status)
    sub.add_parser("ls", help="List the missions with their total time").set_defaults(func=cmd_ls)
    sub.add_parser("log", help="Show every recorded interval").set_defaults(func=cmd_log)

    return parser


def _report(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except ConfigurationError as exc:
        _report(str(exc))
        return EXIT_ENVIRONMENT

    log_cfg = config["logging"]
    configure_logging(
        level=log_cfg["level"],
        format_json=log_cfg["format_json"],
        include_timestamp=log_cfg["include_timestamp"],
    )

    tracker = MissionTracker.from_config(config)
    try:
        return args.func(tracker, args, config["display"])
    except UsageConflictError as exc:
        logger.info("Command rejected", command=args.command, error=str(exc), state=exc.current_state)
        _report(f"{exc} (current state: {exc.current_state})")
        return EXIT_USAGE_CONFLICT
    except DataIntegrityError as exc:
        logger.debug("Data integrity failure", command=args.command, error=str(exc), context=exc.context)
        _report(str(exc))
        return EXIT_DATA_INTEGRITY
    except SystemFailureError as exc:
        logger.debug("Environment failure", command=args.command, error=str(exc))
        _report(str(exc))
        return EXIT_ENVIRONMENT
    except Exception:
        logger.exception("Uncaught exception in command, exiting", command=args.command)
        return EXIT_UNEXPECTED
