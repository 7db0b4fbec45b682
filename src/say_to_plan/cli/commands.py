# src/say_to_plan/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.errors import SayToPlanError, TaskValidationError
from ..core.state import AppState
from ..tasks.task_api import (
    add_manual_task,
    confirm_candidate,
    format_due,
    format_task_line,
    parse_due_field,
)
from ..tasks.task_models import ParsedCandidate, Task
from ..tasks.task_parser import parse_transcript

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = "You are signed out. Use /login <user> first."


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except SayToPlanError as e:
            # Validation/ownership/storage problems are user-facing, not crashes.
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _split_due(args: list[str]) -> tuple[str, str | None]:
    """Split "text words --due when" into (text, when)."""
    if "--due" not in args:
        return " ".join(args), None
    i = args.index("--due")
    return " ".join(args[:i]), " ".join(args[i + 1 :])


def _resolve_task(state: AppState, ref: str) -> Task | str:
    """Find a task by id or unique id prefix; returns an error text otherwise."""
    task = state.task_store.get(ref)
    if task is not None:
        return task
    matches = state.task_store.find_by_prefix(ref)
    if not matches:
        return f"No task with id {ref!r}."
    if len(matches) > 1:
        return f"Id {ref!r} is ambiguous ({len(matches)} tasks). Use more characters."
    return matches[0]


def describe_candidate(candidate: ParsedCandidate) -> str:
    due = ""
    if candidate.due_date is not None:
        due = f" (due {candidate.due_date.date().isoformat()})"
    return (
        f'Heard: "{candidate.description}"{due}\n'
        "  /yes to save, /yes <new text> to save edited, /no to discard."
    )


def offer_candidate(state: AppState, candidate: ParsedCandidate) -> str:
    """Park a parsed candidate until the user confirms or discards it."""
    with state.lock:
        state.pending_candidate = candidate
    return describe_candidate(candidate)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    voice = "available" if state.voice.available else "unavailable (manual entry only)"
    return (
        "Status:\n"
        f"  User: {state.identity.user_id or '<signed out>'}\n"
        f"  Storage: {getattr(settings, 'storage_backend', '?')}\n"
        f"  Voice: {voice} [{state.voice.state.value}]"
    )


def cmd_login(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /login <user>"
    state.identity.sign_in(args[0])
    count = len(state.task_store.tasks)
    return f"Signed in as {state.identity.user_id}. {count} task(s) loaded."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if not state.identity.signed_in:
        return "Already signed out."
    state.voice.stop()
    with state.lock:
        state.pending_candidate = None
    state.identity.sign_out()
    return "Signed out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    return state.identity.user_id or "<signed out>"


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <text>                 -> add verbatim
    /add <text> --due <when>    -> with due date (YYYY-MM-DD, today, tomorrow, next week, M/D)
    """
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    text, due_raw = _split_due(args)
    task = add_manual_task(state, text, due_raw)
    if task is None:
        return NOT_SIGNED_IN
    return f"Added: {format_task_line(task)}"


def cmd_say(state: AppState, args: list[str]) -> str:
    """/say <text> -> parse as if it was dictated (same flow as /voice)."""
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    if not args:
        return "Usage: /say <what you would dictate>"
    return offer_candidate(state, parse_transcript(" ".join(args)))


def cmd_voice(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/voice -> start capture; /voice again (or /voice stop) -> cancel."""
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    voice = state.voice
    if not voice.available:
        return "Voice capture is not available here. Type your task instead (or use /add)."

    if voice.capturing or (args and args[0].lower() in ("stop", "cancel", "off")):
        if voice.stop():
            return "Listening cancelled."
        return "Not listening."

    if emit is not None:
        emit("Listening... speak your task.")
    if not voice.start():
        return "Could not start listening. Try again."
    if voice.capturing:
        return "Use /voice again to cancel."
    # Fast sources may already have answered via on_candidate/on_error.
    return "Done listening."


def cmd_yes(state: AppState, args: list[str]) -> str:
    with state.lock:
        candidate = state.pending_candidate
    if candidate is None:
        return "Nothing to confirm. Use /voice or /say first."

    edited = " ".join(args) if args else None
    try:
        task = confirm_candidate(state, candidate, description=edited)
    except TaskValidationError:
        return "The task description is empty. Use /yes <text> or /no."

    with state.lock:
        state.pending_candidate = None
    if task is None:
        return NOT_SIGNED_IN
    return f"Saved: {format_task_line(task)}"


def cmd_no(state: AppState, args: list[str]) -> str:
    with state.lock:
        had = state.pending_candidate is not None
        state.pending_candidate = None
    return "Discarded." if had else "Nothing to discard."


def cmd_list(state: AppState, args: list[str]) -> str:
    """/list [pending|completed|overdue|all]"""
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    store = state.task_store
    view = args[0].lower() if args else "all"
    views = {
        "all": store.tasks,
        "pending": store.pending,
        "completed": store.completed,
        "done": store.completed,
        "overdue": store.overdue,
    }
    getter = views.get(view)
    if getter is None:
        return "Usage: /list [pending|completed|overdue|all]"

    tasks = getter() if callable(getter) else getter
    if not tasks:
        if view == "all":
            return "No tasks yet. Use /voice or type your first task!"
        return f"No {view} tasks."
    lines = [f"{view.capitalize()} tasks ({len(tasks)}):"]
    lines.extend(f"  {format_task_line(t)}" for t in tasks)
    return "\n".join(lines)


def cmd_done(state: AppState, args: list[str]) -> str:
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    if not args:
        return "Usage: /done <id>"
    found = _resolve_task(state, args[0])
    if isinstance(found, str):
        return found
    task = state.task_store.toggle_task(found.id)
    if task is None:
        return f"No task with id {args[0]!r}."
    return ("Completed: " if task.completed else "Reopened: ") + task.description


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> <text>                 -> new text, due date removed
    /edit <id> <text> --due <when>    -> new text and due date
    /edit <id> <text> --keep-due      -> new text, due date kept
    """
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    if len(args) < 2:
        return "Usage: /edit <id> <text> [--due <when> | --keep-due]"
    found = _resolve_task(state, args[0])
    if isinstance(found, str):
        return found

    rest = args[1:]
    keep_due = "--keep-due" in rest
    rest = [a for a in rest if a != "--keep-due"]
    text, due_raw = _split_due(rest)
    due = found.due_date if keep_due and due_raw is None else parse_due_field(due_raw)

    task = state.task_store.edit_task(found.id, text, due)
    if task is None:
        return f"No task with id {args[0]!r}."
    return f"Updated: {format_task_line(task)}"


def cmd_del(state: AppState, args: list[str]) -> str:
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    if not args:
        return "Usage: /del <id>"
    found = _resolve_task(state, args[0])
    if isinstance(found, str):
        return found
    state.task_store.delete_task(found.id)
    return f"Deleted: {found.description}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    if not state.identity.signed_in:
        return NOT_SIGNED_IN
    s = state.task_store.stats()
    lines = [
        "Dashboard:",
        f"  Total: {s.total}",
        f"  Pending: {s.pending}",
        f"  Completed: {s.completed}",
        f"  Overdue: {s.overdue}",
    ]
    if s.total:
        lines.append(f"  Completion rate: {s.completion_rate}%")
    overdue = state.task_store.overdue()
    for t in overdue[:5]:
        lines.append(f"  ! {t.description} ({format_due(t)})")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show user, storage and voice status.")
registry.register("login", cmd_login, help_text="Sign in: /login <user>.", aliases=["signin"])
registry.register("logout", cmd_logout, help_text="Sign out (tasks stay saved).", aliases=["signout"])
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
registry.register("add", cmd_add, help_text="Add a task: /add <text> [--due <when>].")
registry.register("say", cmd_say, help_text="Parse text as if dictated: /say <text>.")
registry.register("voice", cmd_voice, help_text="Start/stop listening for one task.", aliases=["v", "mic"])
registry.register("yes", cmd_yes, help_text="Save the heard task: /yes [edited text].", aliases=["y"])
registry.register("no", cmd_no, help_text="Discard the heard task.", aliases=["n"])
registry.register("list", cmd_list, help_text="List tasks: /list [pending|completed|overdue|all].", aliases=["ls"])
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Edit: /edit <id> <text> [--due <when> | --keep-due].")
registry.register("del", cmd_del, help_text="Delete: /del <id>.", aliases=["rm", "delete"])
registry.register("stats", cmd_stats, help_text="Show dashboard statistics.")
