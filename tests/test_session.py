"""
Session Invalidator Tests
"""

from unittest.mock import MagicMock

from session_client.credential_store import CredentialPair, CredentialStore
from session_client.session import SessionInvalidator


class TestInvalidate:
    def test_clears_store_and_notifies(self, memory_store, session_listener):
        reason = RuntimeError("refresh failed")

        SessionInvalidator(memory_store, session_listener).invalidate(reason)

        assert memory_store.get() is None
        session_listener.assert_called_once_with(reason)

    def test_repeated_invalidation_of_one_cycle_notifies_once(
        self, memory_store, session_listener
    ):
        invalidator = SessionInvalidator(memory_store, session_listener)

        for _ in range(5):
            invalidator.invalidate(cycle=1)

        assert memory_store.get() is None
        session_listener.assert_called_once()

    def test_each_failed_cycle_notifies(self, memory_store, session_listener):
        invalidator = SessionInvalidator(memory_store, session_listener)

        invalidator.invalidate(cycle=1)
        invalidator.invalidate(cycle=2)

        assert session_listener.call_count == 2

    def test_invalidation_without_cycle_always_notifies(
        self, memory_store, session_listener
    ):
        invalidator = SessionInvalidator(memory_store, session_listener)
        invalidator.invalidate()

        memory_store.set(CredentialPair("T9", "R9"))
        invalidator.invalidate()

        assert memory_store.get() is None
        assert session_listener.call_count == 2

    def test_works_without_listener(self, memory_store):
        SessionInvalidator(memory_store).invalidate()
        assert memory_store.get() is None

    def test_listener_exception_is_contained(self, memory_store, caplog):
        listener = MagicMock(side_effect=RuntimeError("boom"))

        SessionInvalidator(memory_store, listener).invalidate()

        assert memory_store.get() is None
        assert "Session listener raised RuntimeError" in caplog.text

    def test_listener_can_be_replaced(self):
        store = CredentialStore()
        store.set(CredentialPair("T1", "R1"))
        first, second = MagicMock(), MagicMock()
        invalidator = SessionInvalidator(store, first)

        invalidator.set_listener(second)
        invalidator.invalidate()

        first.assert_not_called()
        second.assert_called_once_with(None)
