"""
Tests for the voice interaction state machine.
"""

import io
from datetime import datetime

import pytest
from rich.console import Console

from conftest import FakeSpeech, scripted_classifier
from virtual_assistant.assistant import (
    ConversationMode,
    ConversationPhase,
    LocalDispatcher,
    SessionConfig,
    TerminalSpeech,
    VoiceSession,
)
from virtual_assistant.assistant.session import GOODBYE, NOT_UNDERSTOOD, SYSTEM_PROBLEM
from virtual_assistant.classifier import IntentClassifier


class Recorder:
    """Dispatcher and URL opener stand-in."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.commands = []
        self.opened = []

    def __call__(self, command):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return self.reply

    def open(self, url):
        self.opened.append(url)
        return True


def make_session(speech, dispatcher, name="Jarvis", opener=None, **kwargs):
    config = SessionConfig(assistant_name=name, watchdog_interval_s=0, **kwargs)
    opener = opener or getattr(dispatcher, "open", None)
    return VoiceSession(speech, dispatcher, config, url_opener=opener)


def simple_dispatcher(name="Jarvis", clock=None):
    classifier = IntentClassifier.from_backend("simple", language="en")
    return LocalDispatcher(classifier, assistant_name=name, user_name="Asha", clock=clock)


class TestStart:
    """Tests for the greeting and initial capture."""

    def test_greets_then_listens(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.start()

        assert fake_speech.last_spoken == "Hello, I am Jarvis. How can I help you?"
        assert session.phase == ConversationPhase.SPEAKING
        assert session.mode == ConversationMode.CONVERSATION_ACTIVE
        assert not fake_speech.capturing

        fake_speech.finish_speech()
        assert session.phase == ConversationPhase.LISTENING
        assert fake_speech.capturing
        assert session.locks.capture.held
        assert not session.locks.speech.held

    def test_custom_greeting(self, fake_speech):
        session = make_session(fake_speech, Recorder(), greeting="Namaste!")
        session.start()
        assert fake_speech.last_spoken == "Namaste!"

    def test_start_after_close(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.close()
        with pytest.raises(RuntimeError):
            session.start()


class TestNameGating:
    """Tests for armed-by-name listening."""

    def test_transcript_without_name_is_ignored(self, fake_speech):
        recorder = Recorder({"type": "general", "userInput": "x", "response": "y"})
        session = make_session(fake_speech, recorder)
        session.arm()

        fake_speech.hear("what time is it")
        assert recorder.commands == []
        assert session.user_text == "what time is it"
        assert session.phase == ConversationPhase.LISTENING
        assert session.mode == ConversationMode.ARMED_BY_NAME

    def test_name_activates_conversation(self, fake_speech, fixed_clock):
        session = make_session(fake_speech, simple_dispatcher("Alexa", fixed_clock), name="Alexa")
        session.arm()

        fake_speech.hear("Alexa, what time is it")
        assert session.mode == ConversationMode.CONVERSATION_ACTIVE
        assert fake_speech.last_spoken == "Current time is 02:05 PM"
        assert fake_speech.capture_stops == 1

    def test_name_match_is_case_insensitive_substring(self, fake_speech):
        recorder = Recorder({"type": "general", "userInput": "hey", "response": "Hi!"})
        session = make_session(fake_speech, recorder)
        session.arm()
        fake_speech.hear("heyJARVIS are you there")
        assert recorder.commands == ["heyJARVIS are you there"]

    def test_active_conversation_needs_no_name(self, fake_speech):
        recorder = Recorder({"type": "general", "userInput": "x", "response": "Sure."})
        session = make_session(fake_speech, recorder)
        session.start()
        fake_speech.finish_speech()

        fake_speech.hear("tell me a joke")
        assert recorder.commands == ["tell me a joke"]
        assert fake_speech.last_spoken == "Sure."


class TestProcessing:
    """Tests for dispatching and the spoken reply."""

    def _active(self, speech, recorder):
        session = make_session(speech, recorder)
        session.start()
        speech.finish_speech()
        return session

    def test_capture_stopped_before_dispatch(self, fake_speech):
        seen = {}

        def dispatcher(command):
            seen["capturing"] = fake_speech.capturing
            seen["phase"] = session.phase
            return {"type": "general", "userInput": command, "response": "ok"}

        session = make_session(fake_speech, dispatcher)
        session.start()
        fake_speech.finish_speech()
        fake_speech.hear("hello")

        assert seen == {"capturing": False, "phase": ConversationPhase.PROCESSING}

    def test_url_opened_after_speech_ends(self, fake_speech):
        recorder = Recorder({
            "type": "youtube-search",
            "userInput": "search cat videos on YouTube",
            "response": "Searching YouTube for cat videos.",
        })
        session = self._active(fake_speech, recorder)

        fake_speech.hear("search cat videos on YouTube")
        assert fake_speech.last_spoken == "Searching YouTube for cat videos."
        assert session.ai_text == "Searching YouTube for cat videos."
        assert recorder.opened == []

        fake_speech.finish_speech()
        assert recorder.opened == [
            "https://www.youtube.com/results?search_query=search%20cat%20videos%20on%20YouTube"
        ]
        assert session.phase == ConversationPhase.LISTENING

    def test_url_opened_when_speech_fails(self, fake_speech):
        recorder = Recorder({
            "type": "youtube-search",
            "userInput": "lo-fi beats",
            "response": "Searching YouTube for lo-fi beats.",
        })
        session = self._active(fake_speech, recorder)
        fake_speech.hear("search lo-fi beats on YouTube")

        session.on_speech_error(fake_speech.spoken[-1][1], "synthesis-failed")
        assert recorder.opened == ["https://www.youtube.com/results?search_query=lo-fi%20beats"]
        assert session.phase == ConversationPhase.LISTENING

    def test_url_opened_when_speaker_raises(self):
        class BrokenSpeaker(FakeSpeech):
            def speak(self, text, utterance_id):
                raise RuntimeError("no audio device")

        speech = BrokenSpeaker()
        recorder = Recorder({"type": "github-open", "userInput": "open github", "response": "Opening GitHub."})
        session = make_session(speech, recorder)
        session.start()
        assert session.phase == ConversationPhase.LISTENING

        speech.hear("open github")
        assert recorder.opened == ["https://www.github.com"]
        assert session.phase == ConversationPhase.LISTENING

    def test_cancelled_speech_opens_nothing(self, fake_speech):
        recorder = Recorder({"type": "github-open", "userInput": "open github", "response": "Opening GitHub."})
        session = self._active(fake_speech, recorder)
        fake_speech.hear("open github")
        utterance_id = fake_speech.spoken[-1][1]

        session.stop()
        session.on_speech_error(utterance_id, "interrupted")
        assert recorder.opened == []

    def test_failing_response_callback(self, fake_speech):
        def on_response(reply):
            raise KeyError("ui gone")

        recorder = Recorder({"type": "general", "userInput": "hi", "response": "Hello!"})
        session = make_session(fake_speech, recorder, on_response=on_response)
        session.start()
        fake_speech.finish_speech()

        fake_speech.hear("hi")
        assert fake_speech.last_spoken == "Hello!"
        assert session.phase == ConversationPhase.SPEAKING

        fake_speech.finish_speech()
        assert session.phase == ConversationPhase.LISTENING

    def test_failing_transcript_and_error_callbacks(self, fake_speech):
        def explode(value):
            raise RuntimeError("observer bug")

        recorder = Recorder(error=ConnectionError("backend down"))
        session = make_session(fake_speech, recorder, on_transcript=explode, on_error=explode)
        session.start()
        fake_speech.finish_speech()

        fake_speech.hear("hello")
        assert recorder.commands == ["hello"]
        assert fake_speech.last_spoken == SYSTEM_PROBLEM
        assert session.phase == ConversationPhase.SPEAKING

    def test_general_opens_nothing(self, fake_speech):
        recorder = Recorder({"type": "general", "userInput": "hi", "response": "Hello!"})
        self._active(fake_speech, recorder)
        fake_speech.hear("hi")
        fake_speech.finish_speech()
        assert recorder.opened == []

    def test_open_urls_disabled(self, fake_speech):
        recorder = Recorder({"type": "github-open", "userInput": "open github", "response": "Opening GitHub."})
        session = make_session(fake_speech, recorder, open_urls=False)
        session.start()
        fake_speech.finish_speech()
        fake_speech.hear("open github")
        fake_speech.finish_speech()
        assert recorder.opened == []

    def test_not_understood(self, fake_speech):
        self._active(fake_speech, Recorder(reply=None))
        fake_speech.hear("open spotify")
        assert fake_speech.last_spoken == NOT_UNDERSTOOD

    def test_rejected_kind_opens_nothing(self, fake_speech):
        classifier = scripted_classifier({"type": "open-spotify", "userInput": "open spotify", "response": "Opening."})
        dispatcher = LocalDispatcher(classifier)
        opened = []
        session = make_session(fake_speech, dispatcher, opener=opened.append)
        session.start()
        fake_speech.finish_speech()

        fake_speech.hear("open spotify")
        assert fake_speech.last_spoken == NOT_UNDERSTOOD
        fake_speech.finish_speech()
        assert opened == []
        assert dispatcher.history == ["open spotify"]

    def test_dispatch_error(self, fake_speech):
        errors = []
        recorder = Recorder(error=ConnectionError("backend down"))
        session = make_session(fake_speech, recorder, on_error=errors.append)
        session.start()
        fake_speech.finish_speech()

        fake_speech.hear("hello")
        assert fake_speech.last_spoken == SYSTEM_PROBLEM
        assert len(errors) == 1

        fake_speech.finish_speech()
        assert session.phase == ConversationPhase.LISTENING

    def test_url_opener_failure_is_logged_only(self, fake_speech):
        def broken_opener(url):
            raise OSError("no display")

        recorder = Recorder({"type": "maps-open", "userInput": "open maps", "response": "Opening maps."})
        session = make_session(fake_speech, recorder, opener=broken_opener)
        session.start()
        fake_speech.finish_speech()
        fake_speech.hear("open maps")
        fake_speech.finish_speech()
        assert session.phase == ConversationPhase.LISTENING

    def test_callbacks(self, fake_speech):
        transcripts, responses, states = [], [], []
        reply = {"type": "general", "userInput": "hi", "response": "Hello!"}
        session = make_session(
            fake_speech,
            Recorder(reply),
            on_transcript=transcripts.append,
            on_response=responses.append,
            on_state_change=lambda phase, mode: states.append(phase),
        )
        session.start()
        fake_speech.finish_speech()
        fake_speech.hear("hi")

        assert transcripts == ["hi"]
        assert responses == [reply]
        assert ConversationPhase.PROCESSING in states

    def test_transcript_while_speaking_ignored(self, fake_speech):
        recorder = Recorder({"type": "general", "userInput": "x", "response": "y"})
        session = make_session(fake_speech, recorder)
        session.start()
        fake_speech.hear("hello")
        assert recorder.commands == []


class TestStopPhrases:
    """Tests for ending the conversation by voice."""

    def test_goodbye(self, fake_speech):
        recorder = Recorder()
        session = make_session(fake_speech, recorder)
        session.start()
        fake_speech.finish_speech()

        fake_speech.hear("Okay, goodbye")
        assert fake_speech.last_spoken == GOODBYE
        assert session.mode == ConversationMode.INACTIVE
        assert recorder.commands == []

        fake_speech.finish_speech()
        assert session.phase == ConversationPhase.IDLE
        assert not fake_speech.capturing
        assert session.user_text == ""
        assert session.ai_text == ""

    @pytest.mark.parametrize("phrase", ["stop listening", "Bas karo", "ruk jao", "CHUP HO JAO"])
    def test_all_phrases(self, fake_speech, phrase):
        session = make_session(fake_speech, Recorder())
        session.arm()
        fake_speech.hear(phrase)
        assert fake_speech.last_spoken == GOODBYE

    def test_stop_when_inactive_is_noop(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        fake_speech.hear("goodbye")
        fake_speech.finish_speech()
        spoken = len(fake_speech.spoken)

        fake_speech.hear("goodbye")
        assert len(fake_speech.spoken) == spoken
        assert session.mode == ConversationMode.INACTIVE
        assert session.phase == ConversationPhase.IDLE


class TestCaptureEvents:
    """Tests for capture re-arming."""

    def test_capture_end_rearms(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        assert fake_speech.capture_starts == 1

        fake_speech.end_capture()
        assert fake_speech.capture_starts == 2
        assert session.phase == ConversationPhase.LISTENING

    def test_capture_error_rearms(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        fake_speech.capture_error("no-speech")
        assert fake_speech.capture_starts == 2

    def test_aborted_does_not_rearm(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        fake_speech.capture_error("aborted")
        assert fake_speech.capture_starts == 1
        assert session.phase == ConversationPhase.IDLE

    def test_late_end_of_replaced_capture_ignored(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        first_id = fake_speech.capture_id
        fake_speech.end_capture()
        assert fake_speech.capture_id != first_id

        session.on_capture_ended(first_id)
        session.on_capture_error(first_id, "network")
        assert session.locks.capture.held
        assert fake_speech.capture_starts == 2
        assert session.phase == ConversationPhase.LISTENING

    def test_end_of_stopped_capture_does_not_rearm(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        stopped_id = fake_speech.capture_id
        session.stop()
        session.arm()

        session.on_capture_ended(stopped_id)
        assert session.locks.capture.held
        assert fake_speech.capture_starts == 2

    def test_stale_start_does_not_change_phase(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.start()
        session.on_capture_started(99)
        assert session.phase == ConversationPhase.SPEAKING
        assert not session.locks.capture.held

    def test_capture_start_failure(self):
        speech = FakeSpeech(fail_start=True)
        session = make_session(speech, Recorder())
        session.arm()
        assert session.phase == ConversationPhase.IDLE
        assert not session.locks.capture.held


class TestWatchdog:
    """Tests for watchdog_tick()."""

    def test_rearms_dead_capture(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()

        # Capture dies silently and its end event is lost
        fake_speech.die()
        session.locks.capture.release()
        session.phase = ConversationPhase.IDLE

        assert session.watchdog_tick() is True
        assert fake_speech.capture_starts == 2
        assert fake_speech.capturing

    def test_skips_while_speaking(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.start()
        assert session.watchdog_tick() is False
        assert fake_speech.capture_starts == 0

    def test_skips_when_capture_held(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.arm()
        assert session.watchdog_tick() is False
        assert fake_speech.capture_starts == 1

    def test_skips_when_inactive(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        assert session.watchdog_tick() is False
        assert fake_speech.capture_starts == 0

    def test_background_watchdog_runs(self, fake_speech):
        """A short interval starts the thread; close() stops it."""
        config = SessionConfig(assistant_name="Jarvis", watchdog_interval_s=0.01)
        session = VoiceSession(fake_speech, Recorder(), config, url_opener=lambda url: True)
        session.arm()
        assert session._watchdog is not None and session._watchdog.running
        session.close()
        assert session._watchdog is None


class TestStopAndClose:
    """Tests for explicit stop and teardown."""

    def test_stop_releases_resources(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.start()
        session.stop()

        assert fake_speech.cancelled == 1
        assert session.locks.idle
        assert session.phase == ConversationPhase.IDLE
        assert session.mode == ConversationMode.INACTIVE

    def test_stale_speech_end_ignored(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.start()
        stale_id = fake_speech.spoken[-1][1]
        session.stop()

        session.on_speech_ended(stale_id)
        assert not fake_speech.capturing
        assert session.phase == ConversationPhase.IDLE

    def test_close_ignores_late_events(self, fake_speech):
        recorder = Recorder({"type": "github-open", "userInput": "open github", "response": "Opening GitHub."})
        session = make_session(fake_speech, recorder)
        session.start()
        fake_speech.finish_speech()
        fake_speech.hear("open github")
        utterance_id = fake_speech.spoken[-1][1]

        session.close()
        session.on_speech_ended(utterance_id)
        session.on_capture_ended(fake_speech.capture_id)
        session.handle_transcript("open github")

        assert recorder.opened == []
        assert recorder.commands == ["open github"]
        assert session.watchdog_tick() is False
        assert session.closed

    def test_new_speech_cancels_previous(self, fake_speech):
        session = make_session(fake_speech, Recorder())
        session.start()
        first_id = fake_speech.spoken[-1][1]
        session.start()

        assert fake_speech.cancelled == 1
        session.on_speech_ended(first_id)
        assert session.phase == ConversationPhase.SPEAKING


class TestLocalDispatcher:
    """Tests for in-process dispatch."""

    def test_routes_and_records_history(self, fixed_clock):
        dispatcher = simple_dispatcher(clock=fixed_clock)
        reply = dispatcher("what day is it")
        assert reply == {"type": "get-day", "userInput": "what day is it", "response": "Today is Friday"}
        assert dispatcher.history == ["what day is it"]

    def test_uses_given_clock(self):
        dispatcher = simple_dispatcher(clock=lambda: datetime(2024, 12, 1, 8, 30))
        assert dispatcher("which month")["response"] == "Current month is December"


class TestTerminalSpeech:
    """Tests for the typed-line capabilities."""

    def test_end_of_input_releases_capture(self):
        speech = TerminalSpeech(console=Console(file=io.StringIO()))
        session = make_session(speech, Recorder())
        session.arm()
        assert speech.submit("is anyone there")

        speech.end_of_input()
        assert session.phase == ConversationPhase.IDLE
        assert not session.locks.capture.held
        assert not speech.submit("hello?")
