# src/say_to_plan/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console front-end.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.voice.stop()
    except Exception:
        logger.debug("Voice stop failed.", exc_info=True)

    # Every mutation is already persisted; signing out only drops the in-memory list.
    try:
        state.identity.sign_out()
    except Exception:
        logger.debug("Sign-out failed.", exc_info=True)


def _print_warning(message: str) -> None:
    print(f"[WARN] {message}", flush=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings, on_warning=_print_warning)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled (SAYPLAN_CONSOLE_ENABLED=false); nothing to run.")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
