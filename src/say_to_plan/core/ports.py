# src/say_to_plan/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/speech engines swappable and makes testing easier
(fake speech source instead of a real microphone).
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task
    from ..voice.voice_models import CaptureFailure

TranscriptCallback = Callable[[str], None]
FailureCallback = Callable[["CaptureFailure"], None]
WarningSink = Callable[[str], None]


class TaskRepo(Protocol):
    """
    Key-value persistence of one task collection per owner.

    Implementations must namespace keys by owner_id and never mix partitions.
    Failures are raised as StorageError.
    """

    def load(self, owner_id: str) -> list[Task]: ...

    def save(self, owner_id: str, tasks: list[Task]) -> None: ...


class SpeechSource(Protocol):
    """
    Single-shot speech capture engine.

    The engine decides:
    - how audio is captured and transcribed
    - on which thread callbacks fire

    It must call exactly one of on_transcript/on_error per begin(),
    unless cancel() was called first.
    """

    def is_available(self) -> bool: ...

    def begin(self, on_transcript: TranscriptCallback, on_error: FailureCallback) -> None: ...

    def cancel(self) -> None: ...
