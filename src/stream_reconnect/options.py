from __future__ import annotations

from dataclasses import dataclass, replace
from collections.abc import Collection
from typing import Callable, Iterable

from stream_reconnect.backoff import BackoffFactory, Delay, as_backoff_factory, standard_backoff

# Callbacks may run on whichever thread drives the stream, possibly several
# streams at once when options are shared. Supplying thread-safe callables is
# the caller's job.
Callback = Callable[[], None]


def _noop() -> None:
    return None


def _require_callable(name: str, value: object) -> None:
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {type(value).__name__}")


@dataclass(frozen=True)
class ReconnectOptions:
    """Reconnect behaviour for a stream wrapper.

    Defaults: give up if the very first connect fails, otherwise wait
    progressively longer between attempts until settling on one retry every
    30 minutes. Each ``with_*`` call returns a new value and leaves the
    receiver untouched; copies share the same callables.
    """

    backoff_factory: BackoffFactory = standard_backoff
    exit_if_first_connect_fails: bool = True
    on_connect: Callback = _noop
    on_disconnect: Callback = _noop
    on_connect_fail: Callback = _noop

    def __post_init__(self) -> None:
        object.__setattr__(self, "backoff_factory", as_backoff_factory(self.backoff_factory))
        _require_callable("on_connect", self.on_connect)
        _require_callable("on_disconnect", self.on_disconnect)
        _require_callable("on_connect_fail", self.on_connect_fail)
        if not isinstance(self.exit_if_first_connect_fails, bool):
            raise TypeError("exit_if_first_connect_fails must be a bool")

    def with_backoff_factory(
        self, factory: Callable[[], Iterable[Delay]] | Collection[Delay]
    ) -> ReconnectOptions:
        """Accept anything that yields durations: a factory, or a fixed list.

        With ``lambda: [timedelta(seconds=2)] * 3`` the stream retries three
        times, two seconds apart, and then stops.
        """
        return replace(self, backoff_factory=factory)

    def with_exit_if_first_connect_fails(self, value: bool) -> ReconnectOptions:
        return replace(self, exit_if_first_connect_fails=value)

    def with_on_connect(self, callback: Callback) -> ReconnectOptions:
        return replace(self, on_connect=callback)

    def with_on_disconnect(self, callback: Callback) -> ReconnectOptions:
        return replace(self, on_disconnect=callback)

    def with_on_connect_fail(self, callback: Callback) -> ReconnectOptions:
        return replace(self, on_connect_fail=callback)
