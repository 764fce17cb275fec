"""A simulated host: clock, timers, spawned tasks and calls to other canisters."""

from __future__ import annotations

import heapq
import inspect
import itertools
from collections import deque
from typing import Any, Callable, Coroutine, Sequence

from .models import Account, Principal, TransferArg

Handler = Callable[..., Any]


class CallError(Exception):
    """A call to another canister was rejected."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class Runtime:
    """The environment one canister runs in.

    Time is in nanoseconds and only moves when ``advance`` is awaited.
    Spawned coroutines are queued and run, in order, by ``settle``.
    """

    def __init__(self, canister_id: Principal, now: int = 0) -> None:
        self.canister_id = canister_id
        self._now = now
        self._handlers: dict[tuple[Principal, str], Handler] = {}
        self._timers: list[tuple[int, int, Callable[[], Any]]] = []
        self._tasks: deque[Coroutine[Any, Any, Any]] = deque()
        self._ids = itertools.count(1)

    def time(self) -> int:
        """Return the current time in nanoseconds."""
        return self._now

    def register(self, canister_id: Principal, method: str, handler: Handler) -> None:
        """Answer calls of ``method`` on ``canister_id`` with ``handler``."""
        self._handlers[(canister_id, method)] = handler

    async def call(
        self, canister_id: Principal, method: str, args: Sequence[Any] = ()
    ) -> Any:
        """Call ``method`` on another canister and return its reply."""
        handler = self._handlers.get((canister_id, method))
        if handler is None:
            raise CallError(
                "DestinationInvalid", f"no method {method} on canister {canister_id}"
            )
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                result = await result
        except CallError:
            raise
        except Exception as exc:
            raise CallError("CanisterError", str(exc)) from exc
        return result

    def set_timer(self, delay: int, callback: Callable[[], Any]) -> int:
        """Run ``callback`` once ``delay`` nanoseconds have passed; return the timer id."""
        timer_id = next(self._ids)
        heapq.heappush(self._timers, (self._now + delay, timer_id, callback))
        return timer_id

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        """Queue ``coro`` to run at the next ``settle``."""
        self._tasks.append(coro)

    async def advance(self, nanos: int) -> None:
        """Move the clock forward, firing due timers in deadline order."""
        if nanos < 0:
            raise ValueError("time cannot move backwards")
        target = self._now + nanos
        while self._timers and self._timers[0][0] <= target:
            deadline, _, callback = heapq.heappop(self._timers)
            self._now = max(self._now, deadline)
            result = callback()
            if inspect.iscoroutine(result):
                self.spawn(result)
            await self.settle()
        self._now = target
        await self.settle()

    async def settle(self) -> None:
        """Run queued tasks, including those they spawn, until none are left."""
        while self._tasks:
            await self._tasks.popleft()


async def icrc1_balance_of(
    runtime: Runtime, canister_id: Principal, account: Account
) -> int:
    """Ask a ledger for the balance of ``account``."""
    return await runtime.call(canister_id, "icrc1_balance_of", (account,))


async def icrc1_transfer(runtime: Runtime, canister_id: Principal, arg: TransferArg) -> Any:
    """Ask a ledger to make a transfer and return its reply."""
    return await runtime.call(canister_id, "icrc1_transfer", (arg,))