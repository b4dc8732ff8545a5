#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Game Chooser - command line entry point

Scans the user and default maps folders and prints the resulting game catalog, or opens
the Qt chooser window with ``--gui-backend qt``.
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .app.api import CancelToken, CatalogService, start_catalog_scan_async
from .app.models import ScanReport
from .catalog.model import sort_entries
from .config import Config, ConfigurationError, get_config_path, load_config
from .logging_config import get_performance_stats, reset_performance_stats, setup_logging
from .scanning.recovery import SerialInteractionExecutor
from .ui.compat import GUIBackendError, select_backend
from .ui.interaction import AutoAnswerChannel, ConsoleInteractionChannel
from .version import load_version

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

# Seconds to wait for in-flight map sources after Ctrl-C before giving up on the report.
INTERRUPT_GRACE_SEC = 2.0


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="game-chooser", description="Game Chooser - map catalog scanner")
    parser.add_argument("--config", help=f"Config file (JSON or YAML, default: {get_config_path()})")
    parser.add_argument("--user-maps", metavar="DIR", help="Folder with downloaded maps")
    parser.add_argument("--default-maps", metavar="DIR", help="Folder with bundled maps")
    parser.add_argument("--workers", type=int, help="Scan worker threads (0 = half the CPUs)")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for running scan tasks")
    parser.add_argument("--json", action="store_true", help="Print the catalog as JSON")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    parser.add_argument("--log-dir", default=None, help="Directory for log files")
    parser.add_argument("--no-file-log", action="store_true", help="Only log to stderr")
    parser.add_argument("--gui-backend", choices=["qt", "console"], default=None, help="Front end to use")
    answers = parser.add_mutually_exclusive_group()
    answers.add_argument("--assume-yes", action="store_true", help="Delete corrupt map files without asking")
    answers.add_argument("--assume-no", action="store_true", help="Keep corrupt map files without asking")
    parser.add_argument("--version", action="store_true", help="Show version information")
    return parser.parse_args(argv)


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    if args.user_maps:
        config.set_in("paths", "user_maps_folder", args.user_maps)
    if args.default_maps:
        config.set_in("paths", "default_maps_folder", args.default_maps)
    if args.workers is not None:
        config.set_in("scanner", "max_workers", args.workers)
    if args.timeout is not None:
        config.set_in("scanner", "shutdown_timeout_sec", args.timeout)
    if args.log_level:
        config.set_in("logging", "level", args.log_level)
    if args.log_dir:
        config.set_in("logging", "log_dir", args.log_dir)
    if args.no_file_log:
        config.set_in("logging", "file_logging", False)
    return config


def _build_interaction(args: argparse.Namespace) -> SerialInteractionExecutor:
    if args.assume_yes or args.assume_no:
        return SerialInteractionExecutor(AutoAnswerChannel(answer=bool(args.assume_yes)))
    return SerialInteractionExecutor(ConsoleInteractionChannel())


def _print_report(report: ScanReport, as_json: bool) -> None:
    if as_json:
        payload = {
            "stats": report.stats(),
            "games": [{"name": entry.name, "uri": entry.uri} for entry in sort_entries(report.entries)],
            "diagnostics": [item.to_dict() for item in report.diagnostics],
            "timings": get_performance_stats(),
        }
        print(json.dumps(payload, indent=2, default=str))
        return

    for entry in sort_entries(report.entries):
        print(entry.name)
    stats = report.stats()
    print(
        f"\n{stats['entries']} games from {stats['dispatched']}/{stats['total_sources']} sources "
        f"({stats['state']}{', timed out' if report.timed_out else ''}, {stats['duration_seconds']}s)",
        file=sys.stderr,
    )
    for item in report.diagnostics:
        print(f"  [{item.kind.value}] {item.describe()}", file=sys.stderr)


def _finish_after_interrupt(handle: Any, grace: float = INTERRUPT_GRACE_SEC) -> Optional[ScanReport]:
    """Cancel the scan and wait briefly for its partial report."""
    handle.cancel()
    if handle.join(timeout=grace):
        return handle.result
    logger.warning(
        "Scan still finishing after %.1fs; running map sources complete in the background before exit",
        grace,
    )
    return None


def _run_console(config: Config, args: argparse.Namespace) -> int:
    token = CancelToken()
    with CatalogService(config, interaction=_build_interaction(args)) as service:
        handle = start_catalog_scan_async(service, token)
        try:
            while not handle.join(timeout=0.2):
                pass
        except KeyboardInterrupt:
            logger.warning("Interrupted, cancelling scan...")
            partial = _finish_after_interrupt(handle)
            if partial is not None:
                _print_report(partial, args.json)
            return EXIT_INTERRUPTED
        if handle.error is not None:
            print(f"Scan failed: {handle.error}", file=sys.stderr)
            return EXIT_ERROR
        _print_report(handle.result, args.json)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    reset_performance_stats()

    if args.version:
        print(f"Game Chooser v{load_version()}")
        return EXIT_OK

    try:
        config = _apply_overrides(load_config(args.config), args)
        settings = config.model
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    setup_logging(
        log_level=settings.logging.level,
        log_dir=settings.logging.log_dir,
        enable_file_logging=settings.logging.file_logging,
        max_log_size=settings.logging.max_log_size,
        backup_count=settings.logging.backup_count,
        structured_json=settings.logging.json_output or None,
    )

    try:
        backend = select_backend(args.gui_backend or settings.ui.backend)
    except GUIBackendError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if backend == "qt":
        from .ui import qt_app

        return qt_app.run(config)
    return _run_console(config, args)


if __name__ == "__main__":
    sys.exit(main())
