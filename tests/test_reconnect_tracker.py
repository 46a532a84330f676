import logging
from datetime import timedelta

import pytest

from stream_reconnect.log import configure_logging
from stream_reconnect.options import ReconnectOptions
from stream_reconnect.tracker import ReconnectTracker


def _recording_options(calls: list[str], **overrides) -> ReconnectOptions:
    options = (
        ReconnectOptions()
        .with_on_connect(lambda: calls.append("connect"))
        .with_on_disconnect(lambda: calls.append("disconnect"))
        .with_on_connect_fail(lambda: calls.append("fail"))
    )
    if "backoff" in overrides:
        options = options.with_backoff_factory(overrides["backoff"])
    if "exit_if_first_connect_fails" in overrides:
        options = options.with_exit_if_first_connect_fails(overrides["exit_if_first_connect_fails"])
    return options


def test_first_connect_failure_exits_by_default():
    calls: list[str] = []
    tracker = ReconnectTracker(_recording_options(calls))
    assert tracker.connect_failed() is None
    assert tracker.gave_up
    assert calls == []
    with pytest.raises(RuntimeError):
        tracker.next_delay()


def test_first_connect_failure_retries_when_allowed():
    calls: list[str] = []
    tracker = ReconnectTracker(_recording_options(calls, exit_if_first_connect_fails=False))
    assert tracker.connect_failed() == timedelta(seconds=5)
    assert tracker.connect_failed() == timedelta(seconds=10)
    assert tracker.attempts == 2
    tracker.connected()
    assert calls == ["fail", "fail", "connect"]
    assert tracker.has_connected
    assert tracker.attempts == 0


def test_factory_called_once_per_episode():
    draws = {"count": 0}

    def _factory():
        draws["count"] += 1
        return [1, 2, 3]

    calls: list[str] = []
    tracker = ReconnectTracker(_recording_options(calls, backoff=_factory))
    tracker.connected()
    tracker.disconnected()
    assert tracker.connect_failed() == timedelta(seconds=1)
    assert tracker.connect_failed() == timedelta(seconds=2)
    assert draws["count"] == 1

    tracker.connected()
    tracker.disconnected()
    assert tracker.next_delay() == timedelta(seconds=1)
    assert draws["count"] == 2
    assert calls == ["connect", "disconnect", "fail", "fail", "connect", "disconnect"]


def test_finite_backoff_gives_up_when_exhausted():
    calls: list[str] = []
    tracker = ReconnectTracker(_recording_options(calls, backoff=lambda: [2, 2]))
    tracker.connected()
    tracker.disconnected()
    assert tracker.next_delay() == timedelta(seconds=2)
    assert tracker.connect_failed() == timedelta(seconds=2)
    assert tracker.connect_failed() is None
    assert tracker.gave_up
    with pytest.raises(RuntimeError):
        tracker.connect_failed()


def test_shared_options_keep_independent_backoff():
    options = ReconnectOptions().with_exit_if_first_connect_fails(False)
    first = ReconnectTracker(options, name="first")
    second = ReconnectTracker(options, name="second")
    first.connect_failed()
    first.connect_failed()
    assert first.connect_failed() == timedelta(seconds=20)
    assert second.connect_failed() == timedelta(seconds=5)


def test_callback_errors_propagate():
    def _boom() -> None:
        raise RuntimeError("disconnect handler failed")

    tracker = ReconnectTracker(ReconnectOptions().with_on_disconnect(_boom))
    tracker.connected()
    with pytest.raises(RuntimeError, match="disconnect handler failed"):
        tracker.disconnected()


def test_transitions_are_logged(caplog):
    configure_logging("DEBUG")
    tracker = ReconnectTracker(ReconnectOptions(), name="feed")
    with caplog.at_level(logging.DEBUG, logger="stream_reconnect"):
        tracker.connected()
        tracker.disconnected()
        tracker.connect_failed()
    messages = [record.getMessage() for record in caplog.records]
    assert "feed connected" in messages
    assert "feed disconnected" in messages
    assert any(message.startswith("feed retrying in 5.0s") for message in messages)


def test_configure_logging_adds_a_single_handler():
    logger = configure_logging(logging.INFO)
    count = len(logger.handlers)
    configure_logging(logging.WARNING)
    assert len(logger.handlers) == count
    assert logger.level == logging.WARNING


def test_constructor_factory_yields_timedeltas_to_the_tracker():
    options = ReconnectOptions(backoff_factory=lambda: [2, 2, 2], exit_if_first_connect_fails=False)
    tracker = ReconnectTracker(options)
    assert tracker.connect_failed() == timedelta(seconds=2)


def test_configure_logging_names_its_handler():
    logger = configure_logging()
    names = [handler.get_name() for handler in logger.handlers]
    assert names.count("stream_reconnect.stderr") == 1
