from __future__ import annotations


IDLE = "idle"
SENDING = "sending"


class SessionStateError(Exception):
    pass


class TurnLifecycle:
    _TRANSITIONS = {
        IDLE: {SENDING},
        SENDING: {IDLE},
    }

    def __init__(self) -> None:
        self._state = IDLE

    @property
    def state(self) -> str:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state == SENDING

    def can_transition(self, next_state: str) -> bool:
        return next_state in self._TRANSITIONS.get(self._state, set())

    def transition(self, next_state: str) -> str:
        if not self.can_transition(next_state):
            raise SessionStateError(f"Invalid transition: {self._state} -> {next_state}")
        self._state = next_state
        return self._state

    def try_begin(self) -> bool:
        """Claim the single in-flight slot; False when a turn is already running."""
        if not self.can_transition(SENDING):
            return False
        self._state = SENDING
        return True

    def finish(self) -> None:
        self.transition(IDLE)
