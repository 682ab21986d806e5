"""Tests for bridge payload parsing."""

from __future__ import annotations

import unittest

from hover_chat.attachments import Attachment
from hover_chat.bridge import CaptureEvent, DispatchResult
from hover_chat.events import Event
from hover_chat.exceptions import CaptureFailedError


class CaptureEventTests(unittest.TestCase):
    def test_complete_event_becomes_attachment(self) -> None:
        captured = CaptureEvent.from_event(
            Event("captured", {"id": "/tmp/a.png", "preview": "data:image/png;base64,AA=="})
        )
        self.assertTrue(captured.is_complete)
        self.assertEqual(captured.to_attachment(), Attachment(id="/tmp/a.png", preview="x"))

    def test_missing_preview_or_id_fails(self) -> None:
        for data in ({"id": "/tmp/a.png"}, {"preview": "p"}, {"id": "", "preview": "p"}):
            captured = CaptureEvent.from_event(Event("captured", data))
            self.assertFalse(captured.is_complete)
            with self.assertRaises(CaptureFailedError):
                captured.to_attachment()

    def test_failure_message_includes_error(self) -> None:
        captured = CaptureEvent.from_event(Event("captured", {"error": "No image selected."}))
        with self.assertRaisesRegex(CaptureFailedError, "No image selected."):
            captured.to_attachment()


class DispatchResultTests(unittest.TestCase):
    def test_mapping_payload(self) -> None:
        result = DispatchResult.from_payload({"success": True, "data": "hi"})
        self.assertEqual(result, DispatchResult(success=True, data="hi"))

    def test_result_passes_through(self) -> None:
        result = DispatchResult(success=False, error="nope")
        self.assertIs(DispatchResult.from_payload(result), result)

    def test_malformed_payload_is_failure(self) -> None:
        result = DispatchResult.from_payload("oops")  # type: ignore[arg-type]
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Malformed response from backend.")


if __name__ == "__main__":
    unittest.main()
