#!/usr/bin/env python
"""
Connector Check Script.

Verifies the configured Jira and Zephyr connections before a test run:
- Jira: the project listing is reachable with the configured credentials.
- Zephyr: every given test cycle exists.

Usage:
    python scripts/check_connectors.py --project QA
    python scripts/check_connectors.py --project QA --cycle QA-R3 --cycle QA-R4
    python scripts/check_connectors.py --config config/ci.yaml --cycle QA-R3
"""

import argparse
import sys

from loguru import logger

from automation_core.config.loader import ConfigResolver
from automation_core.connectors.jira_connector import JiraConnector
from automation_core.connectors.zephyr_connector import ZephyrConnector
from automation_core.exceptions import AutomationException


def parse_args(argv=None):
    """Parse command-line arguments for the connector check."""
    parser = argparse.ArgumentParser(
        description="Automation Connectors: Jira/Zephyr connectivity check"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Project configuration file (default: config/configuration.yaml)",
    )
    parser.add_argument(
        "--project",
        type=str,
        default="",
        help="Jira project key to validate",
    )
    parser.add_argument(
        "--cycle",
        action="append",
        default=[],
        help="Zephyr test cycle key to check (repeatable)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def run_checks(args, resolver: ConfigResolver) -> bool:
    """
    Run the requested checks.

    Returns:
        True if every requested check against an active connector passed.
    """
    ok = True

    with JiraConnector.from_properties(resolver) as jira:
        if args.project:
            if not jira.is_active:
                logger.warning("[Check] Jira connector inactive, project check skipped")
            elif jira.validate_project(args.project):
                logger.info(f"[Check] Jira project {args.project}: OK")
            else:
                logger.error(f"[Check] Jira project {args.project}: FAILED")
                ok = False

    with ZephyrConnector.from_properties(resolver) as zephyr:
        if args.cycle:
            if not zephyr.is_active:
                logger.warning("[Check] Zephyr connector inactive, cycle check skipped")
            elif zephyr.test_cycles_exist(args.cycle):
                logger.info(f"[Check] Zephyr cycles {args.cycle}: OK")
            else:
                logger.error(f"[Check] Zephyr cycles {args.cycle}: FAILED")
                ok = False

    return ok


def main(argv=None) -> int:
    """Entry point."""
    args = parse_args(argv)

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    try:
        resolver = ConfigResolver(project_file=args.config)
    except AutomationException as e:
        logger.error(f"[Check] Configuration error: {e}")
        return 1

    return 0 if run_checks(args, resolver) else 1


if __name__ == "__main__":
    sys.exit(main())
