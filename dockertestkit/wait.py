"""Conditions a container must meet before it counts as ready."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from dockertestkit.http_wait import HttpWaitStrategy
from dockertestkit.logs import LogSource
from dockertestkit.strategies import ExitWaitStrategy, HealthWaitStrategy, LogWaitStrategy

_U64_PATTERN = re.compile(r"\+?[0-9]+")
_U64_MAX = 2**64 - 1

Strategy = Union[LogWaitStrategy, HealthWaitStrategy, HttpWaitStrategy, ExitWaitStrategy]


class WaitKind(Enum):
    """The kind of readiness condition."""

    NOTHING = "nothing"
    LOG = "log"
    DURATION = "duration"
    HEALTHCHECK = "healthcheck"
    HTTP = "http"
    EXIT = "exit"


def _non_negative(length: int) -> int:
    if isinstance(length, bool) or not isinstance(length, int):
        raise TypeError("length must be an int")
    if length < 0:
        raise ValueError(f"length must not be negative: {length}")
    return length


def _require(value: object, cls: type, what: str) -> None:
    if not isinstance(value, cls):
        raise TypeError(f"expected a {what}, got {type(value).__name__}")


@dataclass(frozen=True)
class WaitFor:
    """A readiness condition: a log message, a delay, health, HTTP or exit."""

    kind: WaitKind
    strategy: Optional[Strategy] = None
    length: Optional[timedelta] = None

    @classmethod
    def nothing(cls) -> WaitFor:
        """No condition; useful as a default."""
        return cls(WaitKind.NOTHING)

    @classmethod
    def message_on_stdout(cls, message: Union[str, bytes]) -> WaitFor:
        return cls.log(LogWaitStrategy(LogSource.STDOUT, message))

    @classmethod
    def message_on_stderr(cls, message: Union[str, bytes]) -> WaitFor:
        return cls.log(LogWaitStrategy(LogSource.STDERR, message))

    @classmethod
    def log(cls, log_strategy: LogWaitStrategy) -> WaitFor:
        _require(log_strategy, LogWaitStrategy, "LogWaitStrategy")
        return cls(WaitKind.LOG, strategy=log_strategy)

    @classmethod
    def healthcheck(cls) -> WaitFor:
        """Wait for the container to become healthy, polling at the default interval."""
        return cls(WaitKind.HEALTHCHECK, strategy=HealthWaitStrategy())

    @classmethod
    def http(cls, http_strategy: HttpWaitStrategy) -> WaitFor:
        _require(http_strategy, HttpWaitStrategy, "HttpWaitStrategy")
        return cls(WaitKind.HTTP, strategy=http_strategy)

    @classmethod
    def exit(cls, exit_strategy: ExitWaitStrategy) -> WaitFor:
        _require(exit_strategy, ExitWaitStrategy, "ExitWaitStrategy")
        return cls(WaitKind.EXIT, strategy=exit_strategy)

    @classmethod
    def seconds(cls, length: int) -> WaitFor:
        return cls(WaitKind.DURATION, length=timedelta(seconds=_non_negative(length)))

    @classmethod
    def millis(cls, length: int) -> WaitFor:
        return cls(WaitKind.DURATION, length=timedelta(milliseconds=_non_negative(length)))

    @classmethod
    def millis_in_env_var(cls, name: str) -> WaitFor:
        """Wait the milliseconds given in an environment variable.

        An unset or unparsable variable means no condition.
        """
        value = os.environ.get(name)
        if value is None or not _U64_PATTERN.fullmatch(value):
            return cls.nothing()
        millis = int(value)
        if millis > _U64_MAX:
            return cls.nothing()
        return cls(WaitKind.DURATION, length=timedelta(milliseconds=millis))