# src/say_to_plan/tasks/task_parser.py

"""
Transcript parser.

Turns one dictated (or typed) utterance into a ParsedCandidate:
- finds the first due-date phrase by recognizer priority,
- cuts exactly that phrase out of the text,
- strips one leading filler (request phrase or verb) and one article,
- capitalizes the result.

Matching is case-insensitive; the description keeps the speaker's casing.
Keywords are due at the end of their day; M/D dates at the start of theirs,
moved to next year once that moment has passed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta

from .task_models import ParsedCandidate

logger = logging.getLogger(__name__)

# (phrase, day offset) in priority order.
_KEYWORD_OFFSETS: tuple[tuple[str, int], ...] = (
    ("today", 0),
    ("tomorrow", 1),
    ("next week", 7),
)

_KEYWORD_PATTERNS = [
    (re.compile(r"\b" + r"\s+".join(map(re.escape, phrase.split())) + r"\b", re.IGNORECASE), days)
    for phrase, days in _KEYWORD_OFFSETS
]

# M/D without a year; "1/2/2025" and "10/20/30" must not match partially.
_NUMERIC_DATE = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?![\d/])")

_REQUEST_PHRASES = re.compile(
    r"^(?:remind\s+me\s+to|remember\s+to|don'?t\s+forget\s+to|i\s+need\s+to|i\s+have\s+to)\b\s*",
    re.IGNORECASE,
)
_FILLER_VERBS = frozenset({"add", "create", "new", "make", "do", "task", "reminder"})
_ARTICLES = frozenset({"a", "an", "the"})

_WS = re.compile(r"\s+")

DateMatch = tuple[int, int, datetime]


def end_of_day(moment: datetime) -> datetime:
    """23:59:59.999 on the same calendar day as `moment`."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def local_now() -> datetime:
    return datetime.now().astimezone()


def _match_keyword(text: str, now: datetime) -> DateMatch | None:
    for pattern, days in _KEYWORD_PATTERNS:
        m = pattern.search(text)
        if m:
            return m.start(), m.end(), end_of_day(now + timedelta(days=days))
    return None


def _match_numeric(text: str, now: datetime) -> DateMatch | None:
    for m in _NUMERIC_DATE.finditer(text):
        month, day = int(m.group(1)), int(m.group(2))
        if not 1 <= month <= 12:
            continue

        due = None
        for year in (now.year, now.year + 1):
            try:
                candidate = start_of_day(now.replace(year=year, month=month, day=day))
            except ValueError:
                # e.g. 2/30, or 2/29 outside a leap year
                continue
            if candidate >= now:
                due = candidate
                break

        if due is not None:
            return m.start(), m.end(), due
    return None


DATE_RECOGNIZERS: tuple[Callable[[str, datetime], DateMatch | None], ...] = (
    _match_keyword,
    _match_numeric,
)


def _strip_leading_word(text: str, words: frozenset[str]) -> str:
    parts = text.split(maxsplit=1)
    if parts and parts[0].lower() in words:
        return parts[1] if len(parts) > 1 else ""
    return text


def _strip_fillers(text: str) -> str:
    stripped = _REQUEST_PHRASES.sub("", text, count=1)
    if stripped == text:
        stripped = _strip_leading_word(text, _FILLER_VERBS)
    stripped = _strip_leading_word(stripped, _ARTICLES)
    return stripped.strip()


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def extract_due_date(text: str, *, now: datetime | None = None) -> tuple[str, datetime | None]:
    """
    Run the date recognizers in priority order.

    Returns (text with the first matched phrase removed, due date) or
    (text, None) when nothing matched.
    """
    if now is None:
        now = local_now()

    for recognizer in DATE_RECOGNIZERS:
        found = recognizer(text, now)
        if found is None:
            continue
        start, end, due = found
        rest = _WS.sub(" ", text[:start] + " " + text[end:]).strip()
        return rest, due

    return text, None


def parse_transcript(text: str, *, now: datetime | None = None) -> ParsedCandidate:
    """
    Map a raw transcript to a candidate task. Never raises.

    Empty/whitespace input is returned as-is (rejecting it is the
    confirmation step's job).
    """
    if not text or not text.strip():
        return ParsedCandidate(description=text or "", due_date=None)

    try:
        original = text.strip()
        rest, due = extract_due_date(original, now=now)
        description = _strip_fillers(rest)
        if not description:
            description = original
        return ParsedCandidate(description=_capitalize_first(description), due_date=due)
    except Exception:
        logger.exception("Transcript parsing failed; returning raw text.")
        return ParsedCandidate(description=text, due_date=None)
