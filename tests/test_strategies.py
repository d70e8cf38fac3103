from datetime import timedelta

import pytest

from dockertestkit.logs import LogSource
from dockertestkit.strategies import (
    CmdWaitFor,
    CmdWaitKind,
    ExitWaitStrategy,
    HealthWaitStrategy,
    LogWaitStrategy,
)


def test_cmd_wait_nothing():
    assert CmdWaitFor.nothing().kind is CmdWaitKind.NOTHING
    assert CmdWaitFor.nothing() == CmdWaitFor.nothing()


def test_cmd_wait_messages_are_bytes():
    out = CmdWaitFor.message_on_stdout("foo")
    err = CmdWaitFor.message_on_stderr(b"foo")
    assert out.kind is CmdWaitKind.STDOUT_MESSAGE
    assert out.message == b"foo"
    assert err.kind is CmdWaitKind.STDERR_MESSAGE
    assert err.message == out.message


def test_cmd_wait_exit_code():
    cond = CmdWaitFor.exit_code(-1)
    assert cond.kind is CmdWaitKind.EXIT_CODE
    assert cond.code == -1
    assert cond == CmdWaitFor.exit_code(-1)
    assert cond != CmdWaitFor.exit_code(0)


def test_cmd_wait_durations_agree():
    assert CmdWaitFor.seconds(3).length == timedelta(seconds=3)
    assert CmdWaitFor.seconds(2) == CmdWaitFor.millis(2000)
    assert CmdWaitFor.millis(5).kind is CmdWaitKind.DURATION


def test_cmd_wait_rejects_negative_duration():
    with pytest.raises(ValueError):
        CmdWaitFor.seconds(-1)
    with pytest.raises(TypeError):
        CmdWaitFor.exit_code("0")


def test_exit_strategy_defaults_and_overrides():
    default = ExitWaitStrategy()
    assert default.expected_code is None
    assert default.poll_interval == timedelta(milliseconds=100)
    custom = default.with_exit_code(0).with_poll_interval(timedelta(seconds=1))
    assert custom.expected_code == 0
    assert custom.poll_interval == timedelta(seconds=1)
    assert default.expected_code is None


def test_exit_strategy_poll_interval_in_seconds():
    assert ExitWaitStrategy().with_poll_interval(0.5).poll_interval == timedelta(seconds=0.5)
    with pytest.raises(ValueError):
        ExitWaitStrategy().with_poll_interval(-1)


def test_health_strategy_poll_interval():
    default = HealthWaitStrategy()
    assert default.poll_interval == timedelta(milliseconds=100)
    assert default.with_poll_interval(timedelta(seconds=2)).poll_interval == timedelta(seconds=2)
    with pytest.raises(TypeError):
        default.with_poll_interval("fast")


def test_log_strategy_shortcuts():
    out = LogWaitStrategy.stdout("server is ready")
    err = LogWaitStrategy.stderr(b"server will be listening to")
    assert out == LogWaitStrategy(LogSource.STDOUT, b"server is ready")
    assert out.times == 1
    assert err.source is LogSource.STDERR
    assert err.message == b"server will be listening to"


def test_log_strategy_with_times():
    strategy = LogWaitStrategy.stdout("server is ready").with_times(2)
    assert strategy.times == 2
    assert strategy.message == b"server is ready"
    with pytest.raises(ValueError):
        strategy.with_times(-1)


def test_log_strategy_rejects_bad_message():
    with pytest.raises(TypeError):
        LogWaitStrategy.stdout(123)