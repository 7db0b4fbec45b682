# src/say_to_plan/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import offer_candidate
from ..cli.commands import registry as command_registry
from ..core.errors import TaskValidationError
from ..core.state import AppState
from ..tasks.task_api import add_manual_task, format_task_line
from ..tasks.task_models import ParsedCandidate
from ..voice.voice_models import CaptureFailure

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def attach_voice_callbacks(state: AppState, emit) -> None:
    """Route voice results (they may arrive on the capture thread) to the console."""

    def on_candidate(candidate: ParsedCandidate) -> None:
        emit(offer_candidate(state, candidate))

    def on_error(failure: CaptureFailure) -> None:
        emit(f"[VOICE] {failure.message} Use /voice to retry or type your task.")

    state.voice.on_candidate = on_candidate
    state.voice.on_error = on_error


def handle_line(state: AppState, user_input: str, emit=None) -> str | None:
    """
    One console line -> reply text.

    Slash commands go to the registry; anything else is a typed task,
    stored verbatim (no date extraction for typed text).
    """
    try:
        with state.lock:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if cmd_response is not None:
        return cmd_response

    if not state.identity.signed_in:
        return "You are signed out. Use /login <user> first."
    try:
        task = add_manual_task(state, user_input)
    except TaskValidationError as e:
        return f"Error: {e}"
    if task is None:
        return "You are signed out. Use /login <user> first."
    return f"Added: {format_task_line(task)}"


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (voice=%s).", state.voice.available)
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "Say to Plan"))
    _print_ts(f"[{app_name}] Type a task, or use /voice to dictate. /help lists commands, /exit quits.\n")
    if not state.voice.available:
        _print_ts("[VOICE] Speech capture is unavailable; manual entry only.")

    attach_voice_callbacks(state, _print_ts)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input, emit=_print_ts)
        if reply:
            _print_ts(reply)

    state.voice.stop()
