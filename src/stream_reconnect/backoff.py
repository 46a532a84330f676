from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import timedelta
from itertools import chain, repeat
from typing import Callable, Iterator, Union

Delay = Union[timedelta, int, float]
DurationIterator = Iterator[timedelta]
# Factories may be shared by several streams and called from any thread.
BackoffFactory = Callable[[], DurationIterator]

STANDARD_SCHEDULE: tuple[timedelta, ...] = (
    timedelta(seconds=5),
    timedelta(seconds=10),
    timedelta(seconds=20),
    timedelta(seconds=30),
    timedelta(seconds=40),
    timedelta(seconds=50),
    timedelta(minutes=1),
    timedelta(minutes=2),
    timedelta(minutes=5),
    timedelta(minutes=10),
    timedelta(minutes=20),
)
STEADY_STATE_DELAY = timedelta(minutes=30)


def to_timedelta(value: Delay) -> timedelta:
    if isinstance(value, timedelta):
        delay = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        delay = timedelta(seconds=value)
    else:
        raise TypeError(f"Backoff delay must be a timedelta or seconds, got {type(value).__name__}")
    if delay < timedelta(0):
        raise ValueError(f"Backoff delay must not be negative: {delay}")
    return delay


def standard_backoff() -> DurationIterator:
    """Escalate from 5s to 20min, then retry every 30min forever."""
    return chain(STANDARD_SCHEDULE, repeat(STEADY_STATE_DELAY))


def schedule_backoff(schedule: Iterable[Delay], repeat_last: bool = False) -> DurationIterator:
    delays = [to_timedelta(value) for value in schedule]
    if repeat_last and delays:
        return chain(delays, repeat(delays[-1]))
    return iter(delays)


def fixed_backoff(delay: Delay, attempts: int | None = None) -> DurationIterator:
    value = to_timedelta(delay)
    if attempts is None:
        return repeat(value)
    if attempts < 0:
        raise ValueError("attempts must be >= 0")
    return repeat(value, attempts)


def exponential_backoff(
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    factor: float = 2.0,
    max_attempts: int | None = None,
) -> DurationIterator:
    if base_delay < 0 or max_delay < 0:
        raise ValueError("base_delay and max_delay must be >= 0")
    if factor < 1.0:
        raise ValueError("factor must be >= 1.0")
    if max_attempts is not None and max_attempts < 0:
        raise ValueError("max_attempts must be >= 0")

    def _delays() -> DurationIterator:
        attempt = 0
        delay = min(base_delay, max_delay)
        while max_attempts is None or attempt < max_attempts:
            yield timedelta(seconds=delay)
            # Once capped the delay stays put, so it never overflows.
            if delay < max_delay:
                delay = min(delay * factor, max_delay)
            attempt += 1

    return _delays()


def _normalised(values: Iterable[Delay]) -> DurationIterator:
    for value in values:
        yield to_timedelta(value)


class _NormalisedFactory:
    """Factory whose sequences yield ``timedelta`` values only."""

    def __init__(self, generate: Callable[[], Iterable[Delay]]) -> None:
        self._generate = generate

    def __call__(self) -> DurationIterator:
        return _normalised(self._generate())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._generate!r})"


def as_backoff_factory(source: Callable[[], Iterable[Delay]] | Collection[Delay]) -> BackoffFactory:
    """Wrap a callable or a fixed collection as a factory of fresh timedelta iterators.

    A callable is invoked once per factory call and its result converted
    lazily. A collection such as a list is copied once and replayed from the
    start on every call. Plain iterators are rejected because they cannot be
    replayed and may never end.
    """
    if source is standard_backoff or isinstance(source, _NormalisedFactory):
        return source
    if callable(source):
        return _NormalisedFactory(source)
    if isinstance(source, (str, bytes)) or not isinstance(source, Collection):
        raise TypeError(
            f"Backoff source must be a callable or a collection such as a list, got {type(source).__name__}"
        )
    snapshot = tuple(source)
    return _NormalisedFactory(lambda: snapshot)
