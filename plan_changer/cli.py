"""
One-shot plan change from the command line (cron friendly).

Exit codes: 0 on success or when another instance holds the lock, 1 on error,
143 when stopped by SIGTERM (the lock is released first).
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from collections.abc import Sequence

from plan_changer.catalog import list_plans, resolve_plan
from plan_changer.config import get_lock_settings, load_portal_settings, missing_portal_vars
from plan_changer.locking import SingleInstanceLock
from plan_changer.main import build_engine
from plan_changer.portal import AutomationEngine
from plan_changer.portal.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _valid_plans() -> str:
    return ", ".join(name for name, _ in list_plans())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Change the Launtel service plan once.")
    parser.add_argument("--psid", dest="psid", default=None, help="Target plan code.")
    parser.add_argument(
        "-p",
        "--plan",
        dest="plan",
        default=None,
        help="Target plan name, e.g. \"Home Fast\" (ignored when --psid is given).",
    )
    parser.add_argument(
        "-d",
        "--debug-html",
        dest="debug_html",
        action="store_true",
        default=None,
        help="Save HTML snapshots of portal pages to the snapshot directory.",
    )
    parser.add_argument(
        "--list-plans",
        dest="list_plans",
        action="store_true",
        help="Print known plan names and codes, then exit.",
    )
    return parser


def main(argv: Sequence[str] | None = None, *, engine: AutomationEngine | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    if args.list_plans:
        for name, code in list_plans():
            print(f"{code}\t{name}")
        return 0

    lock = SingleInstanceLock(get_lock_settings().lock_path)
    if not lock.acquire():
        logger.info("Another instance detected via lock file (%s). Skipping this run.", lock.path)
        return 0

    # SIGTERM becomes SystemExit so the lock is released on the way out.
    previous_handler = signal.signal(signal.SIGTERM, _exit_on_sigterm)
    try:
        return _run(args, engine=engine)
    finally:
        lock.release()
        signal.signal(signal.SIGTERM, previous_handler)


def _exit_on_sigterm(signum: int, _frame: object) -> None:
    logger.info("Received signal %s, releasing lock and exiting", signum)
    sys.exit(128 + signum)


def _run(args: argparse.Namespace, *, engine: AutomationEngine | None) -> int:
    psid: str | None = None
    plan_used: str | None = None
    if args.psid:
        psid = str(args.psid).strip()
    elif args.plan:
        resolved = resolve_plan(args.plan)
        if resolved is None:
            print(f'Unknown plan "{args.plan}". Valid plans: {_valid_plans()}', file=sys.stderr)
            return 1
        psid = resolved.psid
        plan_used = resolved.name

    if not psid:
        print(
            f'Missing required option: --psid NUMBER or --plan "Plan Name". Valid plans: {_valid_plans()}',
            file=sys.stderr,
        )
        return 1

    missing = missing_portal_vars()
    if missing:
        print(f"Missing required env vars: {', '.join(missing)}", file=sys.stderr)
        return 1

    settings = load_portal_settings(debug_html=args.debug_html)
    if settings is None:
        print("Portal settings are not configured.", file=sys.stderr)
        return 1

    logger.info(
        "Using PSID=%s%s",
        psid,
        f' (from plan "{plan_used}")' if plan_used else "",
    )
    logger.info("Loaded settings: %s", json.dumps(settings.redacted(), indent=2))

    result = (engine or build_engine()).run(settings.for_plan(psid))
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
