# main.py

"""Entry point for the ShopEZ storefront (TUI or health check)."""

import argparse
import asyncio
import logging
import sys

from shopez.config.logging_config import setup_logging

logger = logging.getLogger("shopez.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="shopez",
        description="Browse the catalog and manage your cart.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Check connectivity to the catalog, auth, and cart services.",
    )
    return parser


def _run_tui() -> None:
    """Launch the interactive Textual TUI."""
    from shopez.ui.app import ShopApp

    try:
        app = ShopApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("ShopEZ TUI shutting down")


def _run_health_check() -> None:
    """Run remote service health check."""
    from shopez.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the TUI (default) or the health check."""
    log_file = setup_logging()
    logger.info("ShopEZ starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.health:
        _run_health_check()
    else:
        _run_tui()


if __name__ == "__main__":
    main()
