# src/session_client/config.py

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Mapping, Optional, Union

import httpx
from dotenv import load_dotenv

from .timeout_config import TimeoutConfig
from .utils.paths import get_credentials_file

lib_logger = logging.getLogger("session_client")

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_REFRESH_PATH = "/auth/refresh-token"
DEFAULT_EXPIRED_STATUSES = frozenset({401})


def _parse_statuses(raw: str) -> FrozenSet[int]:
    statuses = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        code = int(part)
        if not 400 <= code <= 599:
            raise ValueError(f"{code} is not an HTTP error status")
        statuses.add(code)
    if not statuses:
        raise ValueError("no status codes given")
    return frozenset(statuses)


@dataclass
class ClientConfig:
    """
    Settings for an AuthenticatedClient.

    Attributes:
        base_url: Root URL of the backend API
        refresh_path: Path of the refresh endpoint, relative to base_url
        credentials_file: Where the credential pair is persisted; None keeps
            credentials in memory only
        expired_statuses: Response statuses that mean "access credential expired"
        timeout: Per-phase timeouts for every HTTP call
        refresh_timeout: Deadline in seconds for one whole refresh call
    """

    base_url: str = DEFAULT_BASE_URL
    refresh_path: str = DEFAULT_REFRESH_PATH
    credentials_file: Optional[Path] = None
    expired_statuses: FrozenSet[int] = DEFAULT_EXPIRED_STATUSES
    timeout: httpx.Timeout = field(default_factory=TimeoutConfig.request)
    refresh_timeout: float = field(default_factory=TimeoutConfig.refresh)

    @property
    def refresh_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.refresh_path.lstrip("/")

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """
        Build a config from environment variables.

        Loads ``env_file`` (or a ``.env`` found from the working directory)
        first, without overriding variables that are already set.

        Recognized variables:
            SESSION_API_BASE_URL, SESSION_REFRESH_PATH,
            SESSION_CREDENTIALS_FILE, SESSION_EXPIRED_STATUSES
            (comma-separated), plus the TIMEOUT_* variables of TimeoutConfig.
        """
        if environ is None:
            load_dotenv(env_file, override=False)
            environ = os.environ

        credentials_file = environ.get("SESSION_CREDENTIALS_FILE")

        expired_statuses = DEFAULT_EXPIRED_STATUSES
        raw_statuses = environ.get("SESSION_EXPIRED_STATUSES")
        if raw_statuses:
            try:
                expired_statuses = _parse_statuses(raw_statuses)
            except ValueError as e:
                lib_logger.warning(
                    f"Invalid SESSION_EXPIRED_STATUSES '{raw_statuses}' ({e}). "
                    f"Falling back to {sorted(DEFAULT_EXPIRED_STATUSES)}."
                )

        return cls(
            base_url=environ.get("SESSION_API_BASE_URL", DEFAULT_BASE_URL),
            refresh_path=environ.get("SESSION_REFRESH_PATH", DEFAULT_REFRESH_PATH),
            credentials_file=(
                Path(credentials_file) if credentials_file else get_credentials_file()
            ),
            expired_statuses=expired_statuses,
        )
