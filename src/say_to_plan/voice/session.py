# src/say_to_plan/voice/session.py

"""
Voice session controller.

A small state machine around one single-shot speech capture:
- start() from IDLE begins capturing (one session at a time),
- a transcript is parsed into a ParsedCandidate and handed to on_candidate,
- a failure goes through ERROR back to IDLE and is handed to on_error,
- stop() cancels without producing a candidate.

Whether the platform can capture at all is checked once at construction
(`available`); callers hide voice affordances instead of retrying.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from ..core.ports import SpeechSource
from ..tasks.task_models import ParsedCandidate
from ..tasks.task_parser import parse_transcript
from .voice_models import CaptureErrorCode, CaptureFailure, VoiceState

logger = logging.getLogger(__name__)

CandidateCallback = Callable[[ParsedCandidate], None]
ErrorCallback = Callable[[CaptureFailure], None]
StateCallback = Callable[[VoiceState], None]


class VoiceSessionController:
    def __init__(
        self,
        source: SpeechSource | None,
        *,
        parser: Callable[[str], ParsedCandidate] = parse_transcript,
        on_candidate: CandidateCallback | None = None,
        on_error: ErrorCallback | None = None,
        on_state: StateCallback | None = None,
    ) -> None:
        self._source = source
        self._parser = parser
        self.on_candidate = on_candidate
        self.on_error = on_error
        self.on_state = on_state

        self._lock = threading.RLock()
        self._state = VoiceState.IDLE
        self._session = 0

        self.last_error: CaptureFailure | None = None
        self.available = self._probe(source)

    @staticmethod
    def _probe(source: SpeechSource | None) -> bool:
        if source is None:
            return False
        try:
            ok = bool(source.is_available())
        except Exception:
            logger.exception("Speech source capability check failed")
            ok = False
        if not ok:
            logger.info("Speech capture unavailable; manual entry only.")
        return ok

    @property
    def state(self) -> VoiceState:
        return self._state

    @property
    def capturing(self) -> bool:
        return self._state == VoiceState.CAPTURING

    def _set_state(self, new_state: VoiceState) -> None:
        self._state = new_state
        if self.on_state is not None:
            try:
                self.on_state(new_state)
            except Exception:
                logger.exception("Voice state listener failed")

    def start(self) -> bool:
        """Begin one capture. Returns False when unavailable or already capturing."""
        if not self.available or self._source is None:
            return False

        with self._lock:
            if self._state != VoiceState.IDLE:
                logger.debug("start() ignored in state=%s", self._state.value)
                return False
            self._session += 1
            session = self._session
            self.last_error = None
            self._set_state(VoiceState.CAPTURING)

            try:
                self._source.begin(
                    lambda text: self._on_transcript(session, text),
                    lambda failure: self._on_failure(session, failure),
                )
            except Exception as e:
                logger.exception("Speech source failed to start")
                self._on_failure(session, CaptureFailure(CaptureErrorCode.ENGINE, repr(e)))
                return False

        logger.info("Voice capture started (session=%s)", session)
        return True

    def stop(self) -> bool:
        """Cancel the running capture. Returns False when nothing was capturing."""
        with self._lock:
            if self._state != VoiceState.CAPTURING:
                return False
            # Late callbacks of this session are dropped by the session check.
            self._session += 1
            try:
                if self._source is not None:
                    self._source.cancel()
            except Exception:
                logger.exception("Speech source cancel failed")
            self._set_state(VoiceState.IDLE)

        logger.info("Voice capture cancelled")
        return True

    def _on_transcript(self, session: int, text: str) -> None:
        with self._lock:
            if session != self._session or self._state != VoiceState.CAPTURING:
                logger.debug("Dropping stale transcript (session=%s)", session)
                return
            candidate = self._parser(text)
            self._set_state(VoiceState.IDLE)

        logger.info("Transcript received -> candidate due=%s", candidate.due_date)
        if self.on_candidate is not None:
            try:
                self.on_candidate(candidate)
            except Exception:
                logger.exception("Candidate handler failed")

    def _on_failure(self, session: int, failure: CaptureFailure) -> None:
        with self._lock:
            if session != self._session or self._state != VoiceState.CAPTURING:
                logger.debug("Dropping stale capture failure (session=%s)", session)
                return
            self.last_error = failure
            self._set_state(VoiceState.ERROR)
            self._set_state(VoiceState.IDLE)

        logger.warning("Voice capture failed: %s %s", failure.code.value, failure.detail)
        if self.on_error is not None:
            try:
                self.on_error(failure)
            except Exception:
                logger.exception("Capture error handler failed")
