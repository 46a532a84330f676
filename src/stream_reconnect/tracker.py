from __future__ import annotations

from datetime import timedelta
import logging

from stream_reconnect.backoff import DurationIterator
from stream_reconnect.options import ReconnectOptions

logger = logging.getLogger(__name__)


class ReconnectTracker:
    """Bookkeeping for one reconnecting stream.

    The owning stream reports what happened (connected, disconnected, attempt
    failed) and gets back how long to wait before the next attempt. Waiting,
    sockets and cancellation stay with the caller. One backoff sequence is
    drawn per reconnect episode; an episode ends on the next successful
    connect. Not thread-safe: drive it from the stream's own thread.
    """

    def __init__(self, options: ReconnectOptions, name: str = "stream") -> None:
        self._options = options
        self._name = name
        self._episode: DurationIterator | None = None
        self._attempts = 0
        self._has_connected = False
        self._gave_up = False

    @property
    def options(self) -> ReconnectOptions:
        return self._options

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def has_connected(self) -> bool:
        return self._has_connected

    @property
    def gave_up(self) -> bool:
        return self._gave_up

    @property
    def in_episode(self) -> bool:
        return self._episode is not None

    def connected(self) -> None:
        if self._episode is not None:
            logger.info("%s reconnected after %d failed attempt(s)", self._name, self._attempts)
        else:
            logger.info("%s connected", self._name)
        self._has_connected = True
        self._gave_up = False
        self._episode = None
        self._attempts = 0
        self._options.on_connect()

    def disconnected(self) -> None:
        logger.info("%s disconnected", self._name)
        self._start_episode()
        self._options.on_disconnect()

    def connect_failed(self) -> timedelta | None:
        if self._gave_up:
            raise RuntimeError(f"{self._name} already gave up reconnecting")
        if not self._has_connected and self._episode is None and self._options.exit_if_first_connect_fails:
            logger.warning("%s initial connect failed; not retrying", self._name)
            self._gave_up = True
            return None
        if self._episode is None:
            self._start_episode()
        self._attempts += 1
        self._options.on_connect_fail()
        return self.next_delay()

    def next_delay(self) -> timedelta | None:
        if self._gave_up:
            raise RuntimeError(f"{self._name} already gave up reconnecting")
        if self._episode is None:
            self._start_episode()
        delay = next(self._episode, None)
        if delay is None:
            logger.info("%s backoff exhausted after %d attempt(s); giving up", self._name, self._attempts)
            self._gave_up = True
            self._episode = None
            return None
        logger.debug("%s retrying in %.1fs (attempt %d)", self._name, delay.total_seconds(), self._attempts + 1)
        return delay

    def _start_episode(self) -> None:
        self._episode = iter(self._options.backoff_factory())
        self._attempts = 0
