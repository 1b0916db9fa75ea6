"""Bounded memoization of in-flight coroutine results."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from contextvars import ContextVar
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

__all__ = ["InFlightCache"]

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

# Key of the innermost computation running in the current task.
_CURRENT_KEY: ContextVar[Hashable | None] = ContextVar(
    "tscomponents_in_flight_key", default=None
)


class InFlightCache(Generic[K, V]):
    """Share one result per key between sequential and concurrent callers.

    The first caller for a key computes the value. Later callers, including
    callers that arrive while the computation is still suspended, await the
    same future and receive the identical object. Failed computations are
    not kept, so a later call retries.

    Awaiting a key that (transitively) waits for the caller's own key would
    never complete; ``on_cycle`` builds the exception raised instead.
    """

    def __init__(
        self,
        maxsize: int,
        *,
        on_cycle: Callable[[K], BaseException],
    ) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._on_cycle = on_cycle
        self._entries: OrderedDict[K, asyncio.Future[V]] = OrderedDict()
        self._waits: dict[Hashable, list[Hashable]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_compute(
        self,
        key: K,
        factory: Callable[[], Awaitable[V]],
    ) -> V:
        current = _CURRENT_KEY.get()
        future = self._entries.get(key)
        if future is not None:
            self._entries.move_to_end(key)
            if future.done():
                return future.result()
            if current is not None and self._reaches(key, current):
                raise self._on_cycle(key)
            self._add_wait(current, key)
            try:
                return await asyncio.shield(future)
            finally:
                self._remove_wait(current, key)

        future = asyncio.get_running_loop().create_future()
        self._entries[key] = future
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

        self._add_wait(current, key)
        token = _CURRENT_KEY.set(key)
        try:
            result = await factory()
        except asyncio.CancelledError:
            self._discard(key, future)
            future.cancel()
            raise
        except BaseException as exc:
            self._discard(key, future)
            future.set_exception(exc)
            # Mark the exception as retrieved when nobody else awaits it.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            _CURRENT_KEY.reset(token)
            self._remove_wait(current, key)

    def _discard(self, key: K, future: asyncio.Future[V]) -> None:
        if self._entries.get(key) is future:
            del self._entries[key]

    def _add_wait(self, waiter: Hashable | None, key: Hashable) -> None:
        if waiter is not None:
            self._waits.setdefault(waiter, []).append(key)

    def _remove_wait(self, waiter: Hashable | None, key: Hashable) -> None:
        if waiter is None:
            return
        waiting = self._waits.get(waiter)
        if waiting is None:
            return
        waiting.remove(key)
        if not waiting:
            del self._waits[waiter]

    def _reaches(self, start: Hashable, target: Hashable) -> bool:
        stack = [start]
        seen: set[Hashable] = set()
        while stack:
            node = stack.pop()
            if node == target:
                return True
            if node in seen:
                continue
            seen.add(node)
            stack.extend(self._waits.get(node, ()))
        return False
