from __future__ import annotations

"""
CLI Argument Definition.

Defines the command-line schema of the ``tracelog`` tool: one subcommand
per maintenance task (retention sweep, test alert, settings dump).
"""

import argparse

from tracelog.domain.constants import DEFAULT_DAYS_TO_KEEP

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the tracelog CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="tracelog",
        description="Maintenance tools for tracelog log directories and alerts.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Show internal diagnostics on stderr.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- Retention ---
    sweep = sub.add_parser("sweep", help="Delete dated log directories outside the retention window.")
    sweep.add_argument("base_dir", help="Directory holding YYYY-MM-DD log folders.")
    sweep.add_argument(
        "--days",
        dest="days_to_keep",
        type=_non_negative_int,
        default=DEFAULT_DAYS_TO_KEEP,
        help=f"Days to keep (default: {DEFAULT_DAYS_TO_KEEP}).",
    )
    sweep.add_argument(
        "--level",
        default="ERROR",
        help="Level mask for the sweep's own log lines, e.g. TRACE or 'WARN|ERROR' (default: ERROR).",
    )
    sweep.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the sweep report as JSON.",
    )

    # --- Alerts ---
    alert = sub.add_parser("send-alert", help="Log an ALERT line and send it by mail.")
    alert.add_argument("message", help="Alert message body.")
    alert.add_argument("--config", dest="config_path", required=True, help="JSON settings file.")
    alert.add_argument("--subject", default="tracelog test alert", help="Mail subject.")

    # --- Diagnostics ---
    dump = sub.add_parser("dump-config", help="Print the validated settings as JSON.")
    dump.add_argument("--config", dest="config_path", default=None, help="JSON settings file.")

    return p


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _non_negative_int(value: str) -> int:
    """argparse type accepting integers >= 0."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a value >= 0, got {n}")
    return n
