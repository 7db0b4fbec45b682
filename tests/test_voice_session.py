# tests/test_voice_session.py

from __future__ import annotations

from say_to_plan.tasks.task_models import ParsedCandidate
from say_to_plan.voice.session import VoiceSessionController
from say_to_plan.voice.voice_models import CaptureErrorCode, CaptureFailure, VoiceState

from .fakes import FakeSpeechSource


def _controller(source: FakeSpeechSource | None):
    candidates: list[ParsedCandidate] = []
    errors: list[CaptureFailure] = []
    states: list[VoiceState] = []
    ctl = VoiceSessionController(
        source,
        on_candidate=candidates.append,
        on_error=errors.append,
        on_state=states.append,
    )
    return ctl, candidates, errors, states


def test_transcript_is_parsed_and_surfaced() -> None:
    source = FakeSpeechSource()
    ctl, candidates, errors, states = _controller(source)

    assert ctl.start() is True
    assert ctl.state == VoiceState.CAPTURING

    source.say("remind me to call mom tomorrow")

    assert ctl.state == VoiceState.IDLE
    assert len(candidates) == 1
    assert candidates[0].description == "Call mom"
    assert candidates[0].due_date is not None
    assert errors == []
    assert states == [VoiceState.CAPTURING, VoiceState.IDLE]


def test_second_start_while_capturing_is_rejected() -> None:
    source = FakeSpeechSource()
    ctl, *_ = _controller(source)

    assert ctl.start() is True
    assert ctl.start() is False
    assert source.begin_calls == 1


def test_stop_cancels_without_candidate_and_ignores_late_result() -> None:
    source = FakeSpeechSource()
    ctl, candidates, errors, _ = _controller(source)

    ctl.start()
    assert ctl.stop() is True
    assert ctl.state == VoiceState.IDLE
    assert source.cancel_calls == 1

    source.say("too late")
    source.fail()
    assert candidates == []
    assert errors == []


def test_stop_when_idle_is_rejected() -> None:
    ctl, *_ = _controller(FakeSpeechSource())
    assert ctl.stop() is False


def test_failure_goes_through_error_and_allows_retry() -> None:
    source = FakeSpeechSource()
    ctl, candidates, errors, states = _controller(source)

    ctl.start()
    source.fail(CaptureErrorCode.PERMISSION_DENIED)

    assert ctl.state == VoiceState.IDLE
    assert states == [VoiceState.CAPTURING, VoiceState.ERROR, VoiceState.IDLE]
    assert [e.code for e in errors] == [CaptureErrorCode.PERMISSION_DENIED]
    assert ctl.last_error is not None

    assert ctl.start() is True
    source.say("buy bread")
    assert [c.description for c in candidates] == ["Buy bread"]
    assert ctl.last_error is None


def test_unavailable_capability_is_checked_once() -> None:
    source = FakeSpeechSource(available=False)
    ctl, candidates, errors, states = _controller(source)

    assert ctl.available is False
    assert ctl.start() is False
    assert ctl.start() is False
    assert source.probe_calls == 1
    assert source.begin_calls == 0
    assert errors == [] and states == []


def test_missing_source_means_unavailable() -> None:
    ctl, *_ = _controller(None)
    assert ctl.available is False
    assert ctl.start() is False


def test_begin_raising_is_reported_as_engine_failure() -> None:
    class BrokenSource(FakeSpeechSource):
        def begin(self, on_transcript, on_error) -> None:
            raise OSError("device busy")

    ctl, _, errors, _ = _controller(BrokenSource())

    assert ctl.start() is False
    assert ctl.state == VoiceState.IDLE
    assert [e.code for e in errors] == [CaptureErrorCode.ENGINE]


def test_synchronous_source_completes_inside_start() -> None:
    source = FakeSpeechSource(auto_transcript="add milk today")
    ctl, candidates, _, _ = _controller(source)

    assert ctl.start() is True
    assert ctl.state == VoiceState.IDLE
    assert [c.description for c in candidates] == ["Milk"]


def test_candidate_handler_can_restart_capture() -> None:
    source = FakeSpeechSource()
    ctl = VoiceSessionController(source)
    restarted: list[bool] = []
    ctl.on_candidate = lambda _c: restarted.append(ctl.start())

    ctl.start()
    source.say("walk the dog")

    assert restarted == [True]
    assert ctl.state == VoiceState.CAPTURING


def test_every_error_code_has_a_user_message() -> None:
    for code in CaptureErrorCode:
        message = CaptureFailure(code).message
        assert message.endswith(".")
    assert CaptureFailure(CaptureErrorCode.NO_SPEECH).message.startswith("No speech")
    assert CaptureFailure(CaptureErrorCode.NETWORK).message != CaptureFailure(CaptureErrorCode.ENGINE).message
