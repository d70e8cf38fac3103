import asyncio
import logging

import pytest

from dockertestkit.logs import (
    FunctionConsumer,
    LogConsumer,
    LogFrame,
    LoggingConsumer,
    LogSource,
    LogStream,
    as_consumer,
)


async def _frames(*frames, error=None):
    for frame in frames:
        await asyncio.sleep(0)
        yield frame
    if error is not None:
        raise error


async def _collect(stream):
    return [item async for item in stream]


async def _collect_until_error(stream):
    received = []
    try:
        async for item in stream:
            received.append(item)
    except OSError as exc:
        return received, exc
    return received, None


def test_frame_constructors_tag_source():
    out = LogFrame.stdout("Hello from Docker!\n")
    err = LogFrame.stderr(b"oops")
    assert out.source is LogSource.STDOUT
    assert out.data == b"Hello from Docker!\n"
    assert err.source is LogSource.STDERR
    assert err.text == "oops"


def test_frame_rejects_non_bytes():
    with pytest.raises(TypeError):
        LogFrame.stdout(42)


def test_frame_text_replaces_invalid_utf8():
    assert LogFrame.stdout(b"a\xffb").text == "a\ufffdb"


@pytest.mark.asyncio
async def test_function_consumer_receives_frame():
    seen = []
    consumer = as_consumer(seen.append)
    frame = LogFrame.stdout("Hello from Docker!\n")
    await consumer.accept(frame)
    assert isinstance(consumer, FunctionConsumer)
    assert seen == [frame]


@pytest.mark.asyncio
async def test_function_consumer_awaits_coroutine():
    seen = []

    async def record(frame):
        seen.append(frame.data)

    frame = LogFrame.stderr(b"x")
    result = await FunctionConsumer(record).accept(frame)
    assert result is None
    assert seen == [frame.data]
    assert frame.data == b"x"


def test_as_consumer_passes_consumer_through_and_rejects_others():
    consumer = LoggingConsumer()
    assert as_consumer(consumer) is consumer
    assert isinstance(consumer, LogConsumer)
    with pytest.raises(TypeError):
        as_consumer("not callable")


def test_format_message_strips_trailing_newlines():
    assert LoggingConsumer().format_message("server is ready\r\n\n") == "server is ready"


def test_format_message_with_prefix():
    consumer = LoggingConsumer().with_prefix("web")
    assert consumer.format_message("server is ready\n") == "web server is ready"


def test_levels_default_and_override():
    consumer = LoggingConsumer()
    assert consumer.stdout_level == logging.INFO
    assert consumer.stderr_level == logging.INFO
    changed = consumer.with_stderr_level("error").with_stdout_level(logging.DEBUG)
    assert changed.stderr_level == logging.ERROR
    assert changed.stdout_level == logging.DEBUG
    assert consumer.stderr_level == logging.INFO


def test_unknown_level_name_rejected():
    with pytest.raises(ValueError):
        LoggingConsumer().with_stdout_level("loud")


@pytest.mark.asyncio
async def test_logging_consumer_logs_at_stream_level(caplog):
    consumer = LoggingConsumer().with_stderr_level(logging.ERROR).with_prefix("c1")
    with caplog.at_level(logging.DEBUG, logger="dockertestkit.logs"):
        await consumer.accept(LogFrame.stdout("Hello from Docker!\n"))
        await consumer.accept(LogFrame.stderr("server will be listening to the port 80\n"))
    records = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert records == [
        (logging.INFO, "c1 Hello from Docker!"),
        (logging.ERROR, "c1 server will be listening to the port 80"),
    ]


@pytest.mark.asyncio
async def test_stream_iterates_frames():
    frames = [LogFrame.stdout(b"a"), LogFrame.stderr(b"b")]
    assert await _collect(LogStream(_frames(*frames))) == frames


@pytest.mark.asyncio
async def test_into_stdout_and_stderr_filter():
    frames = [LogFrame.stdout(b"1"), LogFrame.stderr(b"2"), LogFrame.stdout(b"3")]
    assert await _collect(LogStream(_frames(*frames)).into_stdout()) == [b"1", b"3"]
    assert await _collect(LogStream(_frames(*frames)).into_stderr()) == [b"2"]


@pytest.mark.asyncio
async def test_into_stdout_propagates_error():
    stream = LogStream(_frames(LogFrame.stdout(b"1"), error=OSError("broken")))
    received = []
    with pytest.raises(OSError, match="broken"):
        async for item in stream.into_stdout():
            received.append(item)
    assert received == [b"1"]


@pytest.mark.asyncio
async def test_split_separates_streams():
    frames = [
        LogFrame.stdout(b"stdout 1\n"),
        LogFrame.stderr(b"stderr 1\n"),
        LogFrame.stderr(b"stderr 2\n"),
        LogFrame.stdout(b"stdout 2\n"),
    ]
    stdout, stderr = await LogStream(_frames(*frames)).split()
    assert b"".join(await _collect(stdout)) == b"stdout 1\nstdout 2\n"
    assert b"".join(await _collect(stderr)) == b"stderr 1\nstderr 2\n"


@pytest.mark.asyncio
async def test_split_delivers_error_to_both():
    stream = LogStream(_frames(LogFrame.stdout(b"x"), error=OSError("gone")))
    stdout, stderr = await stream.split()

    out_items, out_error = await _collect_until_error(stdout)
    err_items, err_error = await _collect_until_error(stderr)

    assert out_items == [b"x"]
    assert err_items == []
    assert out_error is not None and "gone" in str(out_error)
    assert err_error is not None and "gone" in str(err_error)