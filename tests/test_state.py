"""Tests for the lock-protected send state."""

from __future__ import annotations

import asyncio
import unittest

from hover_chat.exceptions import AlreadyInFlightError
from hover_chat.state import SessionState, StateManager


class StateManagerTests(unittest.IsolatedAsyncioTestCase):
    """Validate the single-slot SENDING claim."""

    async def test_starts_idle(self) -> None:
        manager = StateManager()
        self.assertEqual(manager.state, SessionState.IDLE)
        self.assertFalse(manager.is_sending)

    async def test_transition_if_enforces_expected_state(self) -> None:
        manager = StateManager()
        changed = await manager.transition_if(SessionState.SENDING, SessionState.IDLE)
        self.assertFalse(changed)
        self.assertEqual(manager.state, SessionState.IDLE)

        changed = await manager.transition_if(SessionState.IDLE, SessionState.SENDING)
        self.assertTrue(changed)
        self.assertEqual(manager.state, SessionState.SENDING)

    async def test_sending_rejects_second_claim(self) -> None:
        manager = StateManager()
        async with manager.sending():
            self.assertTrue(manager.is_sending)
            with self.assertRaises(AlreadyInFlightError):
                async with manager.sending():
                    self.fail("second claim must not enter")
            self.assertTrue(manager.is_sending)
        self.assertEqual(manager.state, SessionState.IDLE)

    async def test_sending_releases_on_error(self) -> None:
        manager = StateManager()
        with self.assertRaises(ValueError):
            async with manager.sending():
                raise ValueError("boom")
        self.assertEqual(manager.state, SessionState.IDLE)

    async def test_lock_prevents_double_entry(self) -> None:
        manager = StateManager()

        async def try_enter() -> bool:
            await asyncio.sleep(0)
            return await manager.transition_if(SessionState.IDLE, SessionState.SENDING)

        results = await asyncio.gather(*(try_enter() for _ in range(10)))
        self.assertEqual(sum(1 for result in results if result), 1)
        self.assertEqual(manager.state, SessionState.SENDING)


if __name__ == "__main__":
    unittest.main()
