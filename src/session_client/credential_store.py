# src/session_client/credential_store.py

import os
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .errors import mask_credential
from .utils.resilient_io import safe_read_json, safe_remove, safe_write_json

lib_logger = logging.getLogger("session_client")

# Keys of the persisted file; these match what the backend's login and
# refresh responses are stored under by the web frontend
ACCESS_TOKEN_KEY = "authToken"
REFRESH_TOKEN_KEY = "refreshToken"

ENV_ACCESS_TOKEN = "SESSION_ACCESS_TOKEN"
ENV_REFRESH_TOKEN = "SESSION_REFRESH_TOKEN"


@dataclass(frozen=True)
class CredentialPair:
    """An access token together with the refresh token issued alongside it."""

    access_token: str
    refresh_token: str

    def __post_init__(self):
        if not self.access_token or not self.refresh_token:
            raise ValueError(
                "CredentialPair requires both an access token and a refresh token"
            )

    def __repr__(self) -> str:
        return (
            f"CredentialPair(access_token={mask_credential(self.access_token)!r}, "
            f"refresh_token={mask_credential(self.refresh_token)!r})"
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            ACCESS_TOKEN_KEY: self.access_token,
            REFRESH_TOKEN_KEY: self.refresh_token,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["CredentialPair"]:
        """Parse a persisted pair. Returns None unless both tokens are strings."""
        access_token = data.get(ACCESS_TOKEN_KEY)
        refresh_token = data.get(REFRESH_TOKEN_KEY)
        if not (isinstance(access_token, str) and isinstance(refresh_token, str)):
            return None
        if not (access_token and refresh_token):
            return None
        return cls(access_token=access_token, refresh_token=refresh_token)


class CredentialStore:
    """
    Durable holder of the current credential pair.

    The pair lives in memory as a single immutable value, so ``set`` and
    ``clear`` replace it in one step and readers never observe half of a
    pair. When ``path`` is given the pair is also persisted as JSON; disk
    failures are logged and otherwise ignored.

    ``generation`` increases on every ``set`` so collaborators can tell one
    session apart from the next.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._pair: Optional[CredentialPair] = None
        self._generation = 0

        if self.path is not None:
            self._pair = self._read_from_disk()
            if self._pair is not None:
                lib_logger.debug(
                    f"Loaded credentials from '{self.path.name}' "
                    f"(access token {mask_credential(self._pair.access_token)})"
                )

    @classmethod
    def from_env(
        cls,
        path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CredentialStore":
        """
        Create a store and seed it from environment variables.

        SESSION_ACCESS_TOKEN and SESSION_REFRESH_TOKEN are only used when both
        are set and nothing was loaded from ``path``.
        """
        environ = os.environ if environ is None else environ
        store = cls(path)
        if store.get() is not None:
            return store

        access_token = environ.get(ENV_ACCESS_TOKEN)
        refresh_token = environ.get(ENV_REFRESH_TOKEN)
        if access_token and refresh_token:
            lib_logger.info("Using session credentials from environment variables")
            store.set(CredentialPair(access_token, refresh_token))
        elif access_token or refresh_token:
            lib_logger.warning(
                f"Only one of {ENV_ACCESS_TOKEN}/{ENV_REFRESH_TOKEN} is set; ignoring both"
            )
        return store

    def _read_from_disk(self) -> Optional[CredentialPair]:
        data = safe_read_json(self.path, lib_logger)
        if data is None:
            return None
        pair = CredentialPair.from_dict(data)
        if pair is None:
            lib_logger.warning(
                f"Ignoring incomplete credential file '{self.path.name}'"
            )
        return pair

    @property
    def generation(self) -> int:
        return self._generation

    def get(self) -> Optional[CredentialPair]:
        return self._pair

    def set(self, pair: CredentialPair) -> None:
        """Replace the current pair and persist it (best effort)."""
        if not isinstance(pair, CredentialPair):
            raise TypeError(f"Expected CredentialPair, got {type(pair).__name__}")

        with self._lock:
            self._pair = pair
            self._generation += 1
            if self.path is not None and not safe_write_json(
                self.path, pair.to_dict(), lib_logger
            ):
                lib_logger.warning(
                    f"Credentials for '{self.path.name}' kept in memory only; "
                    f"they will not survive a restart."
                )

    def clear(self) -> None:
        """Forget the current pair and remove it from disk (best effort)."""
        with self._lock:
            self._pair = None
            if self.path is not None:
                safe_remove(self.path, lib_logger)
