"""Tests for the capacity-bounded pending attachment store."""

from __future__ import annotations

import unittest

from hover_chat.attachments import MAX_PENDING_ATTACHMENTS, Attachment, AttachmentStore
from hover_chat.exceptions import (
    AttachmentNotFoundError,
    CapacityExceededError,
    DuplicateAttachmentError,
)


def _shot(index: int) -> Attachment:
    return Attachment(id=f"/tmp/shot-{index}.png", preview=f"data:image/png;base64,{index}")


class AttachmentStoreTests(unittest.TestCase):
    """Validate add/remove/clear/snapshot semantics."""

    def test_add_returns_new_size_up_to_capacity(self) -> None:
        store = AttachmentStore()
        for index in range(MAX_PENDING_ATTACHMENTS):
            self.assertEqual(store.add(_shot(index)), index + 1)
        self.assertEqual(store.size, 5)
        self.assertTrue(store.is_full)

    def test_sixth_add_fails_and_size_stays_five(self) -> None:
        store = AttachmentStore()
        for index in range(5):
            store.add(_shot(index))
        with self.assertRaises(CapacityExceededError):
            store.add(_shot(99))
        self.assertEqual(len(store), 5)
        self.assertNotIn(_shot(99).id, store)

    def test_capacity_is_clamped_to_five(self) -> None:
        self.assertEqual(AttachmentStore(capacity=50).capacity, 5)
        self.assertEqual(AttachmentStore(capacity=0).capacity, 1)

    def test_duplicate_id_is_rejected(self) -> None:
        store = AttachmentStore()
        store.add(_shot(1))
        with self.assertRaises(DuplicateAttachmentError):
            store.add(Attachment(id=_shot(1).id, preview="other"))
        self.assertEqual(store.size, 1)

    def test_identity_is_the_id(self) -> None:
        self.assertEqual(_shot(1), Attachment(id=_shot(1).id, preview="different"))

    def test_remove_present_id_preserves_order(self) -> None:
        store = AttachmentStore()
        for index in range(4):
            store.add(_shot(index))
        self.assertTrue(store.remove(_shot(1).id))
        self.assertEqual(store.ids(), [_shot(0).id, _shot(2).id, _shot(3).id])

    def test_remove_missing_id_fails_without_changes(self) -> None:
        store = AttachmentStore()
        store.add(_shot(0))
        for _ in range(2):
            with self.assertRaises(AttachmentNotFoundError):
                store.remove("/tmp/missing.png")
        self.assertEqual(store.size, 1)

    def test_clear_empties_store(self) -> None:
        store = AttachmentStore()
        store.add(_shot(0))
        store.add(_shot(1))
        store.clear()
        self.assertEqual(store.size, 0)
        store.clear()
        self.assertEqual(store.size, 0)

    def test_snapshot_is_independent_of_later_mutation(self) -> None:
        store = AttachmentStore()
        store.add(_shot(0))
        snapshot = store.snapshot()
        store.add(_shot(1))
        store.clear()
        self.assertEqual(snapshot, (_shot(0),))
        self.assertIsInstance(snapshot, tuple)


if __name__ == "__main__":
    unittest.main()
