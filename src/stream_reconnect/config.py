from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any

import yaml

from stream_reconnect.backoff import BackoffFactory, exponential_backoff, schedule_backoff, standard_backoff
from stream_reconnect.options import ReconnectOptions


@dataclass(frozen=True)
class BackoffConfig:
    schedule: tuple[float, ...] = ()
    repeat_last: bool = False
    base_delay: float = 1.0
    max_delay: float = 30.0
    factor: float = 2.0
    max_attempts: int | None = None

    def factory(self) -> BackoffFactory:
        if self.schedule:
            return partial(schedule_backoff, self.schedule, self.repeat_last)
        return partial(
            exponential_backoff,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            factor=self.factor,
            max_attempts=self.max_attempts,
        )


@dataclass(frozen=True)
class ReconnectConfig:
    backoff: BackoffConfig | None = None
    exit_if_first_connect_fails: bool = True

    def to_options(self, base: ReconnectOptions | None = None) -> ReconnectOptions:
        options = base if base is not None else ReconnectOptions()
        factory = self.backoff.factory() if self.backoff is not None else standard_backoff
        return options.with_backoff_factory(factory).with_exit_if_first_connect_fails(
            self.exit_if_first_connect_fails
        )


def _require(data: dict, key: str) -> Any:
    if key not in data:
        raise KeyError(f"Missing config key: {key}")
    return data[key]


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"Config key {key} must be true or false, got {value!r}")


def _as_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Config key {key} must be a number, got {value!r}")
    return float(value)


def _as_seconds_list(value: Any, key: str) -> tuple[float, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Config key {key} must be a list of seconds, got {value!r}")
    return tuple(_as_number(item, key) for item in value)


def _as_count(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Config key {key} must be a non-negative integer, got {value!r}")
    return value


def _backoff_from_mapping(raw: dict) -> BackoffConfig | None:
    strategy = str(_require(raw, "strategy")).lower()
    if strategy == "schedule":
        schedule = _as_seconds_list(_require(raw, "schedule"), "backoff.schedule")
        if not schedule:
            raise ValueError("backoff.schedule must not be empty")
        if any(value < 0 for value in schedule):
            raise ValueError("backoff.schedule values must be >= 0")
        return BackoffConfig(
            schedule=schedule,
            repeat_last=_as_bool(raw.get("repeat_last", False), "backoff.repeat_last"),
        )
    if strategy == "exponential":
        max_attempts_raw = raw.get("max_attempts")
        config = BackoffConfig(
            base_delay=_as_number(raw.get("base_delay", 1.0), "backoff.base_delay"),
            max_delay=_as_number(raw.get("max_delay", 30.0), "backoff.max_delay"),
            factor=_as_number(raw.get("factor", 2.0), "backoff.factor"),
            max_attempts=_as_count(max_attempts_raw, "backoff.max_attempts") if max_attempts_raw is not None else None,
        )
        if config.base_delay < 0 or config.max_delay < config.base_delay:
            raise ValueError("backoff delays must satisfy 0 <= base_delay <= max_delay")
        if config.factor < 1.0:
            raise ValueError("backoff.factor must be >= 1.0")
        return config
    if strategy == "standard":
        return None
    raise ValueError(f"Unknown backoff strategy: {strategy}")


def reconnect_config_from_mapping(raw: dict) -> ReconnectConfig:
    backoff_raw = raw.get("backoff")
    backoff = _backoff_from_mapping(backoff_raw) if backoff_raw else None
    return ReconnectConfig(
        backoff=backoff,
        exit_if_first_connect_fails=_as_bool(
            raw.get("exit_if_first_connect_fails", True), "exit_if_first_connect_fails"
        ),
    )


def load_reconnect_config(path: str) -> ReconnectConfig:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    return reconnect_config_from_mapping(_require(raw, "reconnect") or {})
