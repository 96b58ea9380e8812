#!/usr/bin/env python3
"""
Local Voice Session Example

Runs a name-gated session in the terminal with the rule-based classifier,
printing every phase change. No backend, API key or microphone needed.

Usage:
    python examples/local_session.py
    > Jarvis, what time is it
    > open github
    > goodbye
"""

from virtual_assistant.assistant import (
    LocalDispatcher,
    SessionConfig,
    TerminalSpeech,
    VoiceSession,
)
from virtual_assistant.classifier import IntentClassifier


def main():
    config = SessionConfig(
        assistant_name="Jarvis",
        user_name="Asha",
        language="en",
        open_urls=False,  # Print instead of opening a browser
        on_state_change=lambda phase, mode: print(f"  [{mode.value} / {phase.value}]"),
        on_response=lambda reply: print(f"  -> {reply['type']}"),
    )

    classifier = IntentClassifier.from_backend("simple", language=config.language)
    dispatcher = LocalDispatcher(classifier, config.assistant_name, config.user_name)

    speech = TerminalSpeech(assistant_label=config.assistant_name)
    session = VoiceSession(speech, dispatcher, config)

    print(f"Say '{config.assistant_name}' to start. Ctrl+D to exit.\n")
    session.arm()

    try:
        while True:
            line = input("> ")
            if not speech.submit(line):
                print("  (not listening, re-arming)")
                session.arm()
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        session.close()
        print(f"\nHistory: {dispatcher.history}")


if __name__ == "__main__":
    main()
