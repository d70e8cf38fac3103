"""Container log frames, log consumers and log streams."""

from __future__ import annotations

import abc
import asyncio
import dataclasses
import inspect
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

log = logging.getLogger(__name__)


class LogSource(str, Enum):
    """The output stream a log frame came from."""

    STDOUT = "stdout"
    STDERR = "stderr"

    def __str__(self) -> str:
        return self.value


def _as_bytes(data: Union[str, bytes, bytearray, memoryview]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected str or bytes, got {type(data).__name__}")


@dataclass(frozen=True)
class LogFrame:
    """One chunk of container output, tagged with its stream."""

    source: LogSource
    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", LogSource(self.source))
        object.__setattr__(self, "data", _as_bytes(self.data))

    @classmethod
    def stdout(cls, data: Union[str, bytes]) -> LogFrame:
        return cls(LogSource.STDOUT, data)

    @classmethod
    def stderr(cls, data: Union[str, bytes]) -> LogFrame:
        return cls(LogSource.STDERR, data)

    @property
    def text(self) -> str:
        """The frame decoded as UTF-8, with invalid bytes replaced."""
        return self.data.decode("utf-8", errors="replace")


class LogConsumer(abc.ABC):
    """Receives every log frame a container produces over its lifetime."""

    @abc.abstractmethod
    async def accept(self, record: LogFrame) -> None:
        """Handle one log frame."""


@dataclass(frozen=True)
class FunctionConsumer(LogConsumer):
    """A consumer backed by a plain function (or coroutine function)."""

    func: Callable[[LogFrame], Any]

    async def accept(self, record: LogFrame) -> None:
        result = self.func(record)
        if inspect.isawaitable(result):
            await result


def as_consumer(consumer: Union[LogConsumer, Callable[[LogFrame], Any]]) -> LogConsumer:
    """Return ``consumer`` as a LogConsumer, wrapping a callable if needed."""
    if isinstance(consumer, LogConsumer):
        return consumer
    if callable(consumer):
        return FunctionConsumer(consumer)
    raise TypeError(f"not a log consumer: {consumer!r}")


def _level(level: Union[int, str]) -> int:
    if isinstance(level, bool):
        raise TypeError("log level must be an int or a level name")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        if isinstance(value, int):
            return value
        raise ValueError(f"unknown log level: {level!r}")
    raise TypeError("log level must be an int or a level name")


@dataclass(frozen=True)
class LoggingConsumer(LogConsumer):
    """Writes container output to this module's logger.

    Both streams are logged at INFO by default.
    """

    stdout_level: int = logging.INFO
    stderr_level: int = logging.INFO
    prefix: Optional[str] = None

    def with_stdout_level(self, level: Union[int, str]) -> LoggingConsumer:
        return dataclasses.replace(self, stdout_level=_level(level))

    def with_stderr_level(self, level: Union[int, str]) -> LoggingConsumer:
        return dataclasses.replace(self, stderr_level=_level(level))

    def with_prefix(self, prefix: str) -> LoggingConsumer:
        """Prefix each message; a space separates prefix and message."""
        return dataclasses.replace(self, prefix=str(prefix))

    def format_message(self, message: str) -> str:
        """Strip trailing line breaks and apply the prefix."""
        message = message.rstrip("\r\n")
        if self.prefix is not None:
            return f"{self.prefix} {message}"
        return message

    async def accept(self, record: LogFrame) -> None:
        level = self.stdout_level if record.source is LogSource.STDOUT else self.stderr_level
        log.log(level, "%s", self.format_message(record.text))


_END = object()


async def _drain(queue: asyncio.Queue, task: asyncio.Task) -> AsyncIterator[bytes]:
    # ``task`` is held here so the pump lives as long as its readers.
    while True:
        item = await queue.get()
        if item is _END:
            return
        if isinstance(item, BaseException):
            raise item
        yield item


class LogStream:
    """An asynchronous stream of log frames."""

    def __init__(self, frames: AsyncIterable[LogFrame]) -> None:
        self._frames = frames

    def __aiter__(self) -> AsyncIterator[LogFrame]:
        return self._frames.__aiter__()

    async def into_stdout(self) -> AsyncIterator[bytes]:
        """Yield only the stdout payloads; errors propagate."""
        async for frame in self._frames:
            if frame.source is LogSource.STDOUT:
                yield frame.data

    async def into_stderr(self) -> AsyncIterator[bytes]:
        """Yield only the stderr payloads; errors propagate."""
        async for frame in self._frames:
            if frame.source is LogSource.STDERR:
                yield frame.data

    async def split(self) -> tuple[AsyncIterator[bytes], AsyncIterator[bytes]]:
        """Split into independent stdout and stderr streams.

        A background task reads the frames; an error is delivered to both streams.
        """
        stdout_queue: asyncio.Queue = asyncio.Queue()
        stderr_queue: asyncio.Queue = asyncio.Queue()

        async def pump() -> None:
            try:
                async for frame in self._frames:
                    if frame.source is LogSource.STDOUT:
                        stdout_queue.put_nowait(frame.data)
                    else:
                        stderr_queue.put_nowait(frame.data)
            except Exception as exc:
                log.debug("Log stream failed: %s", exc)
                stdout_queue.put_nowait(exc)
                stderr_queue.put_nowait(exc)
            finally:
                stdout_queue.put_nowait(_END)
                stderr_queue.put_nowait(_END)

        task = asyncio.get_running_loop().create_task(pump())
        return _drain(stdout_queue, task), _drain(stderr_queue, task)