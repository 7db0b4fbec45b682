# src/say_to_plan/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .identity import IdentitySession

if TYPE_CHECKING:
    from ..tasks.task_models import ParsedCandidate
    from ..tasks.task_store import TaskStore
    from ..voice.session import VoiceSessionController


@dataclass
class AppState:
    # Settings object (Settings or a SimpleNamespace in tests).
    settings: Any

    identity: IdentitySession
    task_store: TaskStore
    voice: VoiceSessionController

    # Candidate waiting for /yes or /no.
    pending_candidate: ParsedCandidate | None = None

    # Front-ends and the voice worker thread share the state.
    lock: threading.RLock = field(default_factory=threading.RLock)
