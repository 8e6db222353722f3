#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import logging
import sys
from dataclasses import replace

from pomosync.config import load_config
from pomosync.context import AppContext

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="pomosync", description="Pomodoro timer + tasks")
    p.add_argument("--db", help="path to the local SQLite database")
    p.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    p.add_argument(
        "--diagnose",
        action="store_true",
        help="run database / Supabase smoke tests and exit",
    )
    p.add_argument(
        "--test-signup",
        action="store_true",
        help="with --diagnose, also sign up a throw-away test user",
    )
    return p.parse_args(argv)


def diagnose(ctx: AppContext, include_user_creation: bool = False) -> int:
    results = ctx.diagnostics.run_all(include_user_creation=include_user_creation)
    for r in results:
        print(f"[{'OK' if r.ok else 'FAIL'}] {r.name}: {r.message}")
        if r.details:
            print(f"       {r.details}")
    return 0 if all(r.ok for r in results) else 1


def main(argv=None):
    args = parse_args(argv)
    config = load_config()
    if args.db:
        config = replace(config, db_path=args.db)
    if args.log_level:
        config = replace(config, log_level=args.log_level.upper())

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not config.cloud_enabled:
        logger.info("SUPABASE_URL / SUPABASE_ANON_KEY not set; running local-only")

    ctx = AppContext(config)
    try:
        if args.diagnose:
            return diagnose(ctx, include_user_creation=args.test_signup)

        from pomosync.ui.main_window import MainWindow

        app = MainWindow(ctx)
        app.run()
        return 0
    finally:
        ctx.close()


if __name__ == "__main__":
    sys.exit(main())
