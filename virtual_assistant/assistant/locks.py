"""Busy flags for the two exclusive speech resources (microphone, speaker)."""


class BusyFlag:
    """
    Non-blocking, non-queuing ownership flag for one resource.

    A second acquire while held fails instead of waiting; release is
    idempotent so every exit path can call it.
    """

    def __init__(self, name: str):
        self.name = name
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def try_acquire(self) -> bool:
        if self._held:
            return False
        self._held = True
        return True

    def release(self) -> None:
        self._held = False

    def __repr__(self) -> str:
        return f"BusyFlag({self.name!r}, held={self._held})"


class ResourceLocks:
    """The capture and speech flags of one voice session."""

    def __init__(self):
        self.capture = BusyFlag("capture")
        self.speech = BusyFlag("speech")

    @property
    def idle(self) -> bool:
        return not (self.capture.held or self.speech.held)
