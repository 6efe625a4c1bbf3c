from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Dispatches the parsed subcommand, bootstraps a LoggerHandle for the task,
and renders results for humans or as JSON. Internal diagnostics (settings
warnings, transport debug output) go to stderr through the stdlib logging
root when --debug is given.
"""

import json
import logging
import sys
from dataclasses import asdict, replace
from typing import List, Optional

from tracelog.api import start_from_settings
from tracelog.core.handle import LoggerHandle
from tracelog.domain.config import TracelogSettings, load_settings, settings_to_dict
from tracelog.domain.exceptions import ConfigurationError, TracelogError
from tracelog.domain.models import SweepReport
from tracelog.infra.logging import create_stream_handler
from tracelog.interface.cli import args as cli_args

logger = logging.getLogger(__name__)

_DIAGNOSTIC_FMT = "%(levelname)s | %(message)s"
_DIAGNOSTIC_ATTR = "_tracelog_cli_diagnostics"

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 usage/configuration error).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    _configure_diagnostics(args.debug)
    logger.debug(f"CLI command: {args.command}")

    try:
        if args.command == "sweep":
            return _run_sweep(args)
        if args.command == "send-alert":
            return _run_send_alert(args)
        if args.command == "dump-config":
            return _run_dump_config(args)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except TracelogError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    parser.error(f"unknown command {args.command!r}")
    return 2


# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _run_sweep(args) -> int:
    handle = LoggerHandle()
    handle.start(args.level)
    report = handle.sweep(args.base_dir, args.days_to_keep)

    if args.json_output:
        print(json.dumps(asdict(report), ensure_ascii=False, indent=2))
    else:
        _print_sweep_summary(report)
    return 0 if report.ok else 1


def _run_send_alert(args) -> int:
    settings = load_settings(args.config_path)
    if settings.email is None:
        raise ConfigurationError(f"No usable 'email' section in {args.config_path}.")

    # Console only: a one-shot alert must not create dated log folders
    handle = start_from_settings(_console_only(settings), LoggerHandle())
    result = handle.alert(args.subject, "tracelog", "send-alert", "%s", args.message)

    if result.ok:
        print(f"Alert {result.status}.")
        return 0
    print(f"ERROR: alert {result.status}: {result.error}", file=sys.stderr)
    return 1


def _run_dump_config(args) -> int:
    settings = load_settings(args.config_path)
    print(json.dumps(settings_to_dict(settings), ensure_ascii=False, indent=2))
    return 0


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _console_only(settings: TracelogSettings) -> TracelogSettings:
    return replace(settings, log_dir=None)


def _configure_diagnostics(debug: bool) -> None:
    """Attach a stderr handler to the root logger for CLI diagnostics, replacing a previous one."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.WARNING)

    for h in list(root.handlers):
        if getattr(h, _DIAGNOSTIC_ATTR, False):
            root.removeHandler(h)

    handler = create_stream_handler(sys.stderr, logging.Formatter(_DIAGNOSTIC_FMT))
    setattr(handler, _DIAGNOSTIC_ATTR, True)
    root.addHandler(handler)


def _print_sweep_summary(report: SweepReport) -> None:
    """Render a SweepReport for the terminal."""
    print(f"Swept: {report.base_dir}")
    print(f"Removed: {len(report.removed)}")
    for path in report.removed:
        print(f"  - {path}")
    print(f"Kept: {len(report.kept)}")
    if report.skipped:
        print(f"Skipped (not a date): {len(report.skipped)}")
    if report.failed:
        print(f"Failed: {len(report.failed)}", file=sys.stderr)
        for path in report.failed:
            print(f"  - {path}", file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
