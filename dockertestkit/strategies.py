"""Readiness conditions for exec commands and containers."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from dockertestkit.logs import LogSource

_DEFAULT_POLL_INTERVAL = timedelta(milliseconds=100)

Interval = Union[timedelta, int, float]


def _as_bytes(message: Union[str, bytes, bytearray, memoryview]) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    raise TypeError(f"expected str or bytes, got {type(message).__name__}")


def _non_negative(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int")
    if value < 0:
        raise ValueError(f"{what} must not be negative: {value}")
    return value


def _as_interval(value: Interval) -> timedelta:
    if isinstance(value, timedelta):
        interval = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        interval = timedelta(seconds=value)
    else:
        raise TypeError("poll interval must be a timedelta or a number of seconds")
    if interval < timedelta(0):
        raise ValueError("poll interval must not be negative")
    return interval


class CmdWaitKind(Enum):
    """The kind of condition an exec command waits for."""

    NOTHING = "nothing"
    STDOUT_MESSAGE = "stdout_message"
    STDERR_MESSAGE = "stderr_message"
    DURATION = "duration"
    EXIT_CODE = "exit_code"


@dataclass(frozen=True)
class CmdWaitFor:
    """A condition to wait for after running a command in a container."""

    kind: CmdWaitKind
    message: Optional[bytes] = None
    length: Optional[timedelta] = None
    code: Optional[int] = None

    @classmethod
    def nothing(cls) -> CmdWaitFor:
        """No condition at all."""
        return cls(CmdWaitKind.NOTHING)

    @classmethod
    def message_on_stdout(cls, message: Union[str, bytes]) -> CmdWaitFor:
        return cls(CmdWaitKind.STDOUT_MESSAGE, message=_as_bytes(message))

    @classmethod
    def message_on_stderr(cls, message: Union[str, bytes]) -> CmdWaitFor:
        return cls(CmdWaitKind.STDERR_MESSAGE, message=_as_bytes(message))

    @classmethod
    def exit_code(cls, code: int) -> CmdWaitFor:
        if isinstance(code, bool) or not isinstance(code, int):
            raise TypeError("exit code must be an int")
        return cls(CmdWaitKind.EXIT_CODE, code=code)

    @classmethod
    def seconds(cls, length: int) -> CmdWaitFor:
        return cls(CmdWaitKind.DURATION, length=timedelta(seconds=_non_negative(length, "length")))

    @classmethod
    def millis(cls, length: int) -> CmdWaitFor:
        return cls(
            CmdWaitKind.DURATION, length=timedelta(milliseconds=_non_negative(length, "length"))
        )


@dataclass(frozen=True)
class ExitWaitStrategy:
    """Wait for the container to exit, optionally with a given exit code."""

    expected_code: Optional[int] = None
    poll_interval: timedelta = _DEFAULT_POLL_INTERVAL

    def with_poll_interval(self, poll_interval: Interval) -> ExitWaitStrategy:
        return dataclasses.replace(self, poll_interval=_as_interval(poll_interval))

    def with_exit_code(self, expected_code: int) -> ExitWaitStrategy:
        if isinstance(expected_code, bool) or not isinstance(expected_code, int):
            raise TypeError("exit code must be an int")
        return dataclasses.replace(self, expected_code=expected_code)


@dataclass(frozen=True)
class HealthWaitStrategy:
    """Wait for the container's health status to become healthy."""

    poll_interval: timedelta = _DEFAULT_POLL_INTERVAL

    def with_poll_interval(self, poll_interval: Interval) -> HealthWaitStrategy:
        return dataclasses.replace(self, poll_interval=_as_interval(poll_interval))


@dataclass(frozen=True)
class LogWaitStrategy:
    """Wait for a message to appear in the container's logs a number of times."""

    source: LogSource
    message: bytes
    times: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", LogSource(self.source))
        object.__setattr__(self, "message", _as_bytes(self.message))
        _non_negative(self.times, "times")

    @classmethod
    def stdout(cls, message: Union[str, bytes]) -> LogWaitStrategy:
        return cls(LogSource.STDOUT, message)

    @classmethod
    def stderr(cls, message: Union[str, bytes]) -> LogWaitStrategy:
        return cls(LogSource.STDERR, message)

    def with_times(self, times: int) -> LogWaitStrategy:
        return dataclasses.replace(self, times=_non_negative(times, "times"))