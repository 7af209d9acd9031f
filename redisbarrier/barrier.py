"""A barrier shared between processes, kept in Redis.

Every party increments a counter key. The last party to arrive runs the
optional barrier action, then wakes the others by pushing release tokens
onto a list they are blocked on.
"""

from __future__ import annotations

import abc
import datetime
import math
import threading
from typing import Any, Callable, Optional, Union

from redis.exceptions import RedisError

__all__ = [
    "Barrier",
    "BarrierCancelledError",
    "BarrierTimeoutError",
    "BrokenBarrierError",
    "RedisBarrier",
]

_ARRIVE_SCRIPT = """
local n = redis.call("INCR", KEYS[1])
if n == 1 then
    local timeout = tonumber(ARGV[1])
    if timeout < 1 then timeout = 1 end
    redis.call("EXPIRE", KEYS[1], timeout)
end
return n
"""

_RELEASE_TOKEN = "go"
_POLL_INTERVAL = 0.01


class BrokenBarrierError(threading.BrokenBarrierError):
    """Raised when the barrier is, or becomes, broken."""

    def __init__(self, message: str = "broken redis barrier") -> None:
        super().__init__(message)


class BarrierTimeoutError(TimeoutError):
    """Raised when the other parties did not arrive in time."""


class BarrierCancelledError(Exception):
    """Raised when a wait is interrupted through its cancel event."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class Barrier(abc.ABC):
    """A point where a fixed number of parties wait for each other."""

    @abc.abstractmethod
    def wait(self, cancel: Optional[threading.Event] = None) -> None:
        """Block until every party has called wait."""

    @abc.abstractmethod
    def number_waiting(self) -> int:
        """Return how many parties are currently waiting."""

    @property
    @abc.abstractmethod
    def parties(self) -> int:
        """The number of parties needed to trip the barrier."""

    @property
    @abc.abstractmethod
    def broken(self) -> bool:
        """Whether the barrier is in the broken state."""

    @abc.abstractmethod
    def reset(self) -> None:
        """Break the barrier, releasing every waiting party."""


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _blocking_seconds(timeout: float) -> int:
    """Whole seconds for BLPOP: 0 blocks forever, sub-second waits become 1."""
    if timeout <= 0:
        return 0
    if timeout < 1:
        return 1
    return int(timeout)


class RedisBarrier(Barrier):
    """A barrier whose state lives under ``barrier_key`` in Redis."""

    def __init__(
        self,
        client: Any,
        barrier_key: str,
        parties: int,
        timeout: Union[float, datetime.timedelta],
        action: Optional[Callable[[], Any]] = None,
    ) -> None:
        if parties <= 0:
            raise ValueError("parties must be positive number")
        if isinstance(timeout, datetime.timedelta):
            timeout = timeout.total_seconds()
        self._client = client
        self._barrier_key = barrier_key
        self._release_key = f"{barrier_key}:release"
        self._parties = parties
        self._timeout = float(timeout)
        self._action = action
        self._broken = False
        self._lock = threading.Lock()

    @property
    def barrier_key(self) -> str:
        return self._barrier_key

    @property
    def release_key(self) -> str:
        return self._release_key

    @property
    def parties(self) -> int:
        return self._parties

    @property
    def broken(self) -> bool:
        with self._lock:
            return self._broken

    def wait(self, cancel: Optional[threading.Event] = None) -> None:
        """Block until all parties arrive.

        Raises BrokenBarrierError if the barrier is or becomes broken,
        BarrierTimeoutError if the others do not arrive in time, and
        BarrierCancelledError if ``cancel`` is set while waiting, which also
        breaks the barrier. An exception from the barrier action is re-raised
        after breaking the barrier.
        """
        if self.broken:
            raise BrokenBarrierError()
        if cancel is not None and cancel.is_set():
            raise BarrierCancelledError()

        arrived = self._client.eval(
            _ARRIVE_SCRIPT, 1, self._barrier_key, _round_half_away(self._timeout)
        )
        if arrived is None:
            raise RuntimeError(
                f"script execution failed for barrier {self._barrier_key}"
            )
        if isinstance(arrived, bool) or not isinstance(arrived, int):
            raise TypeError("redis result n type is not int64")

        if arrived == self._parties:
            if self._action is not None:
                try:
                    self._action()
                except Exception:
                    self._break()
                    raise
            self._release()
            return

        self._await_release(cancel)
        if self.broken:
            raise BrokenBarrierError()

    def number_waiting(self) -> int:
        try:
            value = self._client.get(self._barrier_key)
            return int(value)
        except (RedisError, TypeError, ValueError):
            return 0

    def reset(self) -> None:
        self._break()

    def _await_release(self, cancel: Optional[threading.Event]) -> None:
        if cancel is None:
            self._pop_release()
            return

        outcome: dict = {}
        finished = threading.Event()

        def worker() -> None:
            try:
                self._pop_release()
            except BaseException as exc:  # handed back to the waiting thread
                outcome["error"] = exc
            finally:
                finished.set()

        threading.Thread(target=worker, daemon=True).start()
        while not finished.wait(_POLL_INTERVAL):
            if cancel.is_set():
                self._break()
                raise BarrierCancelledError()
        if "error" in outcome:
            raise outcome["error"]

    def _pop_release(self) -> None:
        popped = self._client.blpop(
            [self._release_key], timeout=_blocking_seconds(self._timeout)
        )
        if popped is None:
            raise BarrierTimeoutError(f"barrier {self._barrier_key} wait timeout")

    def _release(self) -> None:
        try:
            if self._parties > 1:
                self._client.rpush(
                    self._release_key, *([_RELEASE_TOKEN] * (self._parties - 1))
                )
            self._client.delete(self._barrier_key)
            self._client.delete(self._release_key)
        except RedisError:
            pass

    def _break(self) -> None:
        with self._lock:
            self._broken = True
        self._release()