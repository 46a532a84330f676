from .backoff import (
    BackoffFactory,
    DurationIterator,
    as_backoff_factory,
    exponential_backoff,
    fixed_backoff,
    schedule_backoff,
    standard_backoff,
)
from .config import BackoffConfig, ReconnectConfig, load_reconnect_config, reconnect_config_from_mapping
from .log import configure_logging
from .options import ReconnectOptions
from .tracker import ReconnectTracker

__all__ = [
    "BackoffFactory",
    "DurationIterator",
    "as_backoff_factory",
    "exponential_backoff",
    "fixed_backoff",
    "schedule_backoff",
    "standard_backoff",
    "BackoffConfig",
    "ReconnectConfig",
    "load_reconnect_config",
    "reconnect_config_from_mapping",
    "configure_logging",
    "ReconnectOptions",
    "ReconnectTracker",
]
