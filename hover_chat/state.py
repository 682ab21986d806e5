"""Session send-state machine with a single-slot, lock-protected claim."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
import logging

from .exceptions import AlreadyInFlightError

LOGGER = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Finite state machine for the send lifecycle."""

    IDLE = "IDLE"
    SENDING = "SENDING"


class StateManager:
    """Manage IDLE/SENDING transitions with async lock semantics."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_sending(self) -> bool:
        return self._state == SessionState.SENDING

    async def transition_if(
        self,
        expected_state: SessionState,
        new_state: SessionState,
    ) -> bool:
        """Transition only when current state matches expected state."""
        async with self._lock:
            if self._state != expected_state:
                return False
            self._state = new_state
        LOGGER.info(
            "session.state.transition",
            extra={
                "event": "session.state.transition",
                "from_state": expected_state.value,
                "to_state": new_state.value,
            },
        )
        return True

    @asynccontextmanager
    async def sending(self) -> AsyncIterator[None]:
        """Hold the SENDING slot for the body; busy callers are rejected, not queued.

        The state returns to IDLE however the body exits, including cancellation.
        """
        if not await self.transition_if(SessionState.IDLE, SessionState.SENDING):
            raise AlreadyInFlightError("Busy. Wait for current request to finish.")
        try:
            yield
        finally:
            await self.transition_if(SessionState.SENDING, SessionState.IDLE)
