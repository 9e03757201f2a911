# src/session_client/session.py

import logging
from typing import Callable, Optional

from .credential_store import CredentialStore

lib_logger = logging.getLogger("session_client")

SessionListener = Callable[[Optional[Exception]], None]


class SessionInvalidator:
    """
    Ends the session after a terminal refresh failure.

    Clears the credential store and notifies the host application through a
    single listener (typically: show the login screen). The listener is
    notified once per failed refresh cycle: invalidating again with the same
    ``cycle`` id only re-clears the store.
    """

    def __init__(
        self, store: CredentialStore, listener: Optional[SessionListener] = None
    ):
        self._store = store
        self._listener = listener
        self._notified_cycle: Optional[int] = None

    def set_listener(self, listener: Optional[SessionListener]) -> None:
        self._listener = listener

    def invalidate(
        self, reason: Optional[Exception] = None, cycle: Optional[int] = None
    ) -> None:
        """
        Clear the stored credentials and notify the listener.

        Args:
            reason: The failure that ended the session, passed to the listener
            cycle: Id of the refresh cycle that failed. Calls without one
                always notify.
        """
        self._store.clear()

        if cycle is not None and cycle == self._notified_cycle:
            lib_logger.debug(
                f"Session already invalidated for refresh cycle #{cycle}; "
                f"listener not notified again"
            )
            return
        self._notified_cycle = cycle

        lib_logger.warning(
            f"Session ended, re-authentication required"
            f"{f': {reason}' if reason else ''}"
        )
        if self._listener is None:
            return

        try:
            self._listener(reason)
        except Exception as e:
            # The listener belongs to the host; waiting callers must still be settled
            lib_logger.error(
                f"Session listener raised {type(e).__name__}: {e}", exc_info=True
            )
