# src/session_client/timeout_config.py
"""
Centralized timeout configuration for HTTP requests.

All values can be overridden via environment variables:
    TIMEOUT_CONNECT - Connection establishment timeout (default: 10s)
    TIMEOUT_READ - Read timeout for responses (default: 10s)
    TIMEOUT_WRITE - Request body send timeout (default: 10s)
    TIMEOUT_POOL - Connection pool acquisition timeout (default: 10s)
    TIMEOUT_REFRESH - Upper bound for a whole credential refresh (default: 10s)
"""

import os
import logging
import httpx

lib_logger = logging.getLogger("session_client")


class TimeoutConfig:
    """
    Centralized timeout configuration for HTTP requests.

    All values can be overridden via environment variables.
    """

    # Default values (in seconds)
    _CONNECT = 10.0
    _READ = 10.0
    _WRITE = 10.0
    _POOL = 10.0
    _REFRESH = 10.0

    @classmethod
    def _get_env_float(cls, key: str, default: float) -> float:
        """Get a float value from environment variable, or return default."""
        value = os.environ.get(key)
        if value is not None:
            try:
                parsed = float(value)
            except ValueError:
                lib_logger.warning(
                    f"Invalid value for {key}: {value}. Using default: {default}"
                )
            else:
                if parsed > 0:
                    return parsed
                lib_logger.warning(
                    f"Non-positive value for {key}: {value}. Using default: {default}"
                )
        return default

    @classmethod
    def connect(cls) -> float:
        """Connection establishment timeout."""
        return cls._get_env_float("TIMEOUT_CONNECT", cls._CONNECT)

    @classmethod
    def read(cls) -> float:
        """Read timeout for responses."""
        return cls._get_env_float("TIMEOUT_READ", cls._READ)

    @classmethod
    def write(cls) -> float:
        """Request body send timeout."""
        return cls._get_env_float("TIMEOUT_WRITE", cls._WRITE)

    @classmethod
    def pool(cls) -> float:
        """Connection pool acquisition timeout."""
        return cls._get_env_float("TIMEOUT_POOL", cls._POOL)

    @classmethod
    def refresh(cls) -> float:
        """
        Overall deadline for one refresh call, in seconds.

        Exceeding it is treated as a refresh failure.
        """
        return cls._get_env_float("TIMEOUT_REFRESH", cls._REFRESH)

    @classmethod
    def request(cls) -> httpx.Timeout:
        """Timeout configuration for regular API and refresh requests."""
        return httpx.Timeout(
            connect=cls.connect(),
            read=cls.read(),
            write=cls.write(),
            pool=cls.pool(),
        )
