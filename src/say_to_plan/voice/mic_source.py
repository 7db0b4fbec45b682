# src/say_to_plan/voice/mic_source.py

from __future__ import annotations

import io
import logging
import threading
import wave
from typing import Any

from ..core.ports import FailureCallback, TranscriptCallback
from .voice_models import CaptureErrorCode, CaptureFailure

logger = logging.getLogger(__name__)


def _is_auth_error(exc: Exception) -> bool:
    return exc.__class__.__name__ in {
        "AuthenticationError",
        "PermissionDeniedError",
        "UnauthorizedError",
    }


def _is_connection_error(exc: Exception) -> bool:
    return exc.__class__.__name__ in {
        "APIConnectionError",
        "APITimeoutError",
        "RateLimitError",
        "Timeout",
        "ConnectTimeout",
        "ReadTimeout",
    }


class MicrophoneSpeechSource:
    """
    Best-effort microphone capture + transcription.

    Design goals:
    - Optional dependencies (does not crash if sounddevice/numpy/openai are missing).
    - Does not block the caller: recording and transcription happen in a worker thread.
    - Single shot: one recording of at most `max_seconds`, then one transcription call.

    Notes:
    - Availability (deps importable, input device present, API key set) is probed once.
    - Near-silent recordings are reported as no_speech without calling the API.
    """

    def __init__(self, settings: Any) -> None:
        self._settings = settings
        self._language = str(getattr(settings, "voice_language", "en") or "en")
        self._max_seconds = float(getattr(settings, "voice_max_seconds", 6.0))
        self._sample_rate = int(getattr(settings, "voice_sample_rate", 16000))
        self._silence_threshold = int(getattr(settings, "voice_silence_threshold", 500))
        self._model = str(getattr(settings, "transcribe_model", "whisper-1"))

        self._sd: Any = None
        self._np: Any = None
        self._client: Any = None
        self._available: bool | None = None

        self._worker: threading.Thread | None = None
        self._cancel = threading.Event()

    # ---- capability ----

    def is_available(self) -> bool:
        if self._available is None:
            self._available = self._probe()
        return self._available

    def _probe(self) -> bool:
        if not getattr(self._settings, "voice_enabled", True):
            logger.info("Voice capture disabled by settings.")
            return False

        api_key = getattr(self._settings, "openai_api_key", None)
        if not api_key or not str(api_key).strip():
            logger.warning(
                "Voice capture unavailable: no transcription API key. "
                "Set SAYPLAN_OPENAI_API_KEY to enable it."
            )
            return False

        logger.info("Voice capture: importing dependencies (sounddevice/numpy/openai)...")
        try:
            import numpy as np  # type: ignore
            import sounddevice as sd  # type: ignore
            from openai import OpenAI
        except Exception as e:
            logger.warning(
                "Voice capture unavailable: dependencies are missing or failed to import. "
                "Install the 'voice' extra to enable it. Error: %s",
                repr(e),
            )
            return False

        try:
            sd.query_devices(kind="input")
        except Exception as e:
            logger.warning("Voice capture unavailable: no input device (%s)", repr(e))
            return False

        base_url = getattr(self._settings, "openai_base_url", None) or None
        try:
            self._client = OpenAI(api_key=str(api_key), base_url=base_url, max_retries=0)
        except Exception as e:
            logger.warning("Voice capture unavailable: transcription client failed: %s", repr(e))
            return False

        self._sd = sd
        self._np = np
        logger.info("Voice capture ready (rate=%s, max=%.1fs).", self._sample_rate, self._max_seconds)
        return True

    # ---- capture ----

    def begin(self, on_transcript: TranscriptCallback, on_error: FailureCallback) -> None:
        if not self.is_available():
            on_error(CaptureFailure(CaptureErrorCode.AUDIO_CAPTURE, "speech capture unavailable"))
            return

        self._cancel = threading.Event()
        cancel = self._cancel

        def capture_worker() -> None:
            failure: CaptureFailure | None = None
            text = ""
            try:
                wav = self._record(cancel)
                if cancel.is_set():
                    return
                if wav is None:
                    failure = CaptureFailure(CaptureErrorCode.NO_SPEECH)
                else:
                    text = self._transcribe(wav)
                    if not text.strip():
                        failure = CaptureFailure(CaptureErrorCode.NO_SPEECH)
            except _CaptureAbort as e:
                failure = e.failure
            except Exception as e:
                logger.exception("Capture worker crashed")
                failure = CaptureFailure(CaptureErrorCode.ENGINE, repr(e))

            if cancel.is_set():
                return
            if failure is not None:
                on_error(failure)
            else:
                on_transcript(text.strip())

        self._worker = threading.Thread(target=capture_worker, name="voice-capture", daemon=True)
        self._worker.start()

    def cancel(self) -> None:
        self._cancel.set()
        if self._sd is not None:
            try:
                self._sd.stop()
            except Exception:
                logger.debug("sounddevice stop failed", exc_info=True)

    def _record(self, cancel: threading.Event) -> bytes | None:
        """Record one utterance; returns WAV bytes, or None if it was silence."""
        sd, np = self._sd, self._np
        frames = int(self._max_seconds * self._sample_rate)
        try:
            audio = sd.rec(frames, samplerate=self._sample_rate, channels=1, dtype="int16")
            sd.wait()
        except Exception as e:
            if cancel.is_set():
                return None
            code = CaptureErrorCode.PERMISSION_DENIED if "permission" in str(e).lower() else CaptureErrorCode.AUDIO_CAPTURE
            raise _CaptureAbort(CaptureFailure(code, repr(e))) from e

        peak = int(np.abs(audio).max()) if audio.size else 0
        logger.debug("Recorded %d frames peak=%s", len(audio), peak)
        if peak < self._silence_threshold:
            return None

        buf = io.BytesIO()
        with wave.open(buf, "wb") as wf:
            wf.setnchannels(1)
            wf.setsampwidth(2)
            wf.setframerate(self._sample_rate)
            wf.writeframes(audio.tobytes())
        return buf.getvalue()

    def _transcribe(self, wav: bytes) -> str:
        try:
            result = self._client.audio.transcriptions.create(
                model=self._model,
                file=("speech.wav", wav, "audio/wav"),
                language=self._language,
            )
        except Exception as e:
            if _is_auth_error(e):
                code = CaptureErrorCode.PERMISSION_DENIED
            elif _is_connection_error(e):
                code = CaptureErrorCode.NETWORK
            else:
                code = CaptureErrorCode.ENGINE
            raise _CaptureAbort(CaptureFailure(code, repr(e))) from e

        return str(getattr(result, "text", "") or "")


class _CaptureAbort(Exception):
    def __init__(self, failure: CaptureFailure) -> None:
        super().__init__(failure.code.value)
        self.failure = failure
