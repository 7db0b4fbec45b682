# src/say_to_plan/voice/voice_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class VoiceState(StrEnum):
    """
    Capture session state.

    Idle -> Capturing -> Idle on success or stop();
    Capturing -> Error -> Idle on failure (ERROR is only observable by listeners).
    """

    IDLE = "idle"
    CAPTURING = "capturing"
    ERROR = "error"


class CaptureErrorCode(StrEnum):
    NO_SPEECH = "no_speech"
    PERMISSION_DENIED = "permission_denied"
    AUDIO_CAPTURE = "audio_capture"
    NETWORK = "network"
    ENGINE = "engine"


_USER_MESSAGES = {
    CaptureErrorCode.NO_SPEECH: "No speech was detected. Please try again.",
    CaptureErrorCode.PERMISSION_DENIED: "Microphone or transcription access was denied.",
    CaptureErrorCode.AUDIO_CAPTURE: "Could not record audio from the microphone.",
    CaptureErrorCode.NETWORK: "The transcription service could not be reached.",
    CaptureErrorCode.ENGINE: "Speech recognition failed.",
}


@dataclass(frozen=True, slots=True)
class CaptureFailure:
    """A transient, retryable capture failure reported by a speech source."""

    code: CaptureErrorCode
    detail: str = ""

    @property
    def message(self) -> str:
        return _USER_MESSAGES.get(self.code, "Speech recognition failed.")
