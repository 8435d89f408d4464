"""
HostForge CLI: audit this machine, then optionally repair, update and harden it.

Nothing is changed unless --no-dry-run is given.

Usage examples:
    python -m hostforge.cli.hostforge --audit-only
    python -m hostforge.cli.hostforge --fix-errors --update-all --harden
    python -m hostforge.cli.hostforge --fix-errors --no-dry-run --log-path D:\\logs
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from colorama import Fore, Style
from tabulate import tabulate

from hostcore.base.config import get_config, setup_logging
from hostcore.engine.orchestrator import Orchestrator, RunRequest, build_context
from hostcore.executor.models import RunResult
from hostcore.observer.journal import DecisionLog
from hostcore.reporting.summary import RunReport, report_path_for, write_report
from hostcore.toolkit import Toolbox, windows_toolbox

logger = logging.getLogger("hostforge.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostforge",
        description="Host maintenance: audit health, then optionally repair, update and harden.",
    )
    parser.add_argument("--audit-only", action="store_true", help="Only run the read-only audit")
    parser.add_argument("--fix-errors", action="store_true", help="Run integrity repair, temp cleanup and update-component reset")
    parser.add_argument("--update-all", action="store_true", help="Upgrade packages and trigger an update scan")
    parser.add_argument("--harden", action="store_true", help="Remove non-essential apps, lower telemetry, demote services")
    parser.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Describe actions without performing them (default: on; use --no-dry-run to apply)",
    )
    parser.add_argument("--log-path", type=Path, default=None, help="Directory for the run log (created if absent)")
    parser.add_argument("--report", action="store_true", help="Also write a JSON run report next to the log")
    parser.add_argument("--verbose", action="store_true", help="Debug diagnostics on stderr")
    return parser


def render_summary(result: RunResult) -> str:
    rows = []
    for outcome in result.outcomes:
        status = f"{Fore.GREEN}OK{Style.RESET_ALL}" if outcome.succeeded else f"{Fore.RED}ISSUES{Style.RESET_ALL}"
        rows.append([outcome.module, status, outcome.error or ""])
    table = tabulate(rows, headers=["Module", "Result", "Notes"]) if rows else "(no modules ran)"
    return f"\nRun state: {result.state.value}\n{table}\n"


def main(argv: Optional[Sequence[str]] = None, tools: Optional[Toolbox] = None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    if args.verbose:
        config = replace(config, log=replace(config.log, level="DEBUG"))
    log_dir = args.log_path or config.storage.log_dir
    setup_logging(config, log_dir)

    journal = DecisionLog.for_run(log_dir, datetime.now(), prefix=config.storage.log_prefix)
    request = RunRequest(
        audit_only=args.audit_only,
        repair=args.fix_errors,
        update=args.update_all,
        harden=args.harden,
        dry_run=config.dry_run if args.dry_run is None else args.dry_run,
    )
    logger.debug(f"request: {request.describe()}")

    tools = tools or windows_toolbox(config.maintenance.system_drive)
    ctx = build_context(request, tools, journal, log_dir, config.maintenance)
    result = Orchestrator(ctx, tools).run()

    print(render_summary(result))

    if args.report and result.log_path:
        try:
            path = write_report(RunReport.from_result(result, ctx.simulate), report_path_for(result.log_path))
            print(f"Report written to {path}")
        except OSError as exc:
            logger.error(f"Could not write run report: {exc}")

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
