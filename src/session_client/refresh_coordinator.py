# src/session_client/refresh_coordinator.py

"""
Single-flight credential refresh.

When a request fails because its access token expired, the caller hands the
request to the RefreshCoordinator. The first such caller starts a refresh
cycle; every caller arriving while the cycle is in flight is queued behind it
instead of starting a refresh of its own. Once the refresh settles:

- success: the new pair is stored and every queued request is replayed with
  the new access token, in the order the callers queued
- failure: the session is invalidated once and every queued caller receives
  the same RefreshFailedError

A request is replayed at most once. If its replay fails with an expired
credential again, that failure goes straight back to the caller.
"""

import asyncio
import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

import httpx

from .credential_store import CredentialPair, CredentialStore
from .errors import RefreshFailedError, mask_credential
from .replayer import RequestReplayer
from .session import SessionInvalidator
from .transport import ApiRequest

lib_logger = logging.getLogger("session_client")

RefreshFunc = Callable[[str], Awaitable[CredentialPair]]


class RefreshState(enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


@dataclass
class PendingCaller:
    """A request waiting for the outcome of the in-flight refresh."""

    request: ApiRequest
    future: "asyncio.Future[httpx.Response]"


class RefreshCoordinator:
    """
    Deduplicates concurrent credential refreshes and queues affected callers.

    All state lives on the instance; build one per authenticated client.
    Must be used from a single event loop.
    """

    def __init__(
        self,
        store: CredentialStore,
        refresh_func: RefreshFunc,
        replayer: RequestReplayer,
        invalidator: SessionInvalidator,
        refresh_timeout: float = 10.0,
    ):
        self._store = store
        self._refresh_func = refresh_func
        self._replayer = replayer
        self._invalidator = invalidator
        self._refresh_timeout = refresh_timeout

        self._state = RefreshState.IDLE
        self._pending: List[PendingCaller] = []
        self._cycle_task: Optional[asyncio.Task] = None
        self._replay_tasks: Set[asyncio.Task] = set()
        self._cycle_started_at: Optional[float] = None

        # Statistics
        self._total_cycles: int = 0
        self._successful_refreshes: int = 0
        self._failed_refreshes: int = 0
        self._timeout_refreshes: int = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    def is_refresh_in_progress(self) -> bool:
        return self._state is RefreshState.IN_FLIGHT

    def get_pending_count(self) -> int:
        return len(self._pending)

    async def handle_expired_credential(
        self, request: ApiRequest, failure: Exception
    ) -> httpx.Response:
        """
        Recover ``request`` from an expired-credential failure.

        Args:
            request: The request whose response reported an expired credential
            failure: The error describing that response

        Returns:
            The response of the replayed request

        Raises:
            failure: If ``request`` was already replayed once
            RefreshFailedError: If the refresh cycle failed
            Exception: Whatever the replay itself raised
        """
        if request.retried:
            lib_logger.info(
                f"{request.method} {request.url} failed with an expired credential "
                f"after replay; not refreshing again"
            )
            raise failure

        waiter = PendingCaller(
            request=request.mark_retried(),
            future=asyncio.get_running_loop().create_future(),
        )
        self._pending.append(waiter)

        # No await between the state check and the transition
        if self._state is RefreshState.IDLE:
            self._state = RefreshState.IN_FLIGHT
            self._total_cycles += 1
            self._cycle_started_at = time.time()
            lib_logger.info(
                f"Access credential expired; starting refresh cycle #{self._total_cycles}"
            )
            self._cycle_task = asyncio.create_task(self._run_cycle(self._total_cycles))
        else:
            lib_logger.debug(
                f"Refresh in flight; queued {request.method} {request.url} "
                f"at position {len(self._pending)}"
            )

        return await waiter.future

    async def _refresh(self) -> CredentialPair:
        pair = self._store.get()
        if pair is None:
            raise RefreshFailedError("No refresh token available")

        try:
            new_pair = await asyncio.wait_for(
                self._refresh_func(pair.refresh_token), timeout=self._refresh_timeout
            )
        except asyncio.TimeoutError as e:
            self._timeout_refreshes += 1
            raise RefreshFailedError(
                f"Credential refresh timed out after {self._refresh_timeout}s"
            ) from e
        except RefreshFailedError:
            raise
        except Exception as e:
            raise RefreshFailedError(f"Credential refresh failed: {e}") from e

        if not isinstance(new_pair, CredentialPair):
            raise RefreshFailedError(
                f"Credential refresh returned {type(new_pair).__name__}, "
                f"expected CredentialPair"
            )
        return new_pair

    def _finish_cycle(self) -> List[PendingCaller]:
        """Return to IDLE and detach the callers queued during this cycle."""
        waiters, self._pending = self._pending, []
        self._state = RefreshState.IDLE
        self._cycle_task = None
        self._cycle_started_at = None
        return waiters

    def _reject(
        self, cycle: int, error: RefreshFailedError, waiters: List[PendingCaller]
    ) -> None:
        """Invalidate the session and fail every caller still waiting."""
        self._failed_refreshes += 1
        lib_logger.error(
            f"Credential refresh FAILED: {error.message}. "
            f"Rejecting {len(waiters)} waiting request(s)."
        )
        self._invalidator.invalidate(error, cycle=cycle)
        for waiter in waiters:
            if not waiter.future.done():
                waiter.future.set_exception(error)

    async def _run_cycle(self, cycle: int) -> None:
        try:
            new_pair = await self._refresh()
        except RefreshFailedError as e:
            self._reject(cycle, e, self._finish_cycle())
            return
        except BaseException:
            # Cancelled: release the waiters rather than leaving them hanging
            for waiter in self._finish_cycle():
                if not waiter.future.done():
                    waiter.future.cancel()
            raise

        waiters: Optional[List[PendingCaller]] = None
        try:
            self._store.set(new_pair)
            waiters = self._finish_cycle()
            lib_logger.info(
                f"Credential refresh SUCCESS (access token {mask_credential(new_pair.access_token)}); "
                f"replaying {len(waiters)} request(s)"
            )

            # State is IDLE again: a replay failing from here on opens a new cycle
            for waiter in waiters:
                if waiter.future.done():
                    continue
                task = asyncio.create_task(self._replay_into(waiter, new_pair))
                self._replay_tasks.add(task)
                task.add_done_callback(self._replay_tasks.discard)
        except Exception as e:
            if waiters is None:
                waiters = self._finish_cycle()
            error = RefreshFailedError(
                f"Could not apply refreshed credentials: {type(e).__name__}: {e}"
            )
            error.__cause__ = e
            self._reject(cycle, error, waiters)
            return

        self._successful_refreshes += 1

    async def _replay_into(self, waiter: PendingCaller, pair: CredentialPair) -> None:
        try:
            response = await self._replayer.replay(waiter.request, pair)
        except asyncio.CancelledError:
            if not waiter.future.done():
                waiter.future.cancel()
            raise
        except Exception as e:
            if not waiter.future.done():
                waiter.future.set_exception(e)
        else:
            if not waiter.future.done():
                waiter.future.set_result(response)

    async def aclose(self) -> None:
        """Cancel an in-flight cycle and outstanding replays."""
        tasks = list(self._replay_tasks)
        if self._cycle_task is not None:
            tasks.append(self._cycle_task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def get_status(self) -> Dict[str, Any]:
        """Get current coordinator status for debugging/monitoring."""
        return {
            "state": self._state.value,
            "refresh_duration": (time.time() - self._cycle_started_at)
            if self._cycle_started_at
            else None,
            "pending_count": len(self._pending),
            "replays_in_progress": len(self._replay_tasks),
            "stats": {
                "cycles": self._total_cycles,
                "successful": self._successful_refreshes,
                "failed": self._failed_refreshes,
                "timeouts": self._timeout_refreshes,
            },
        }
