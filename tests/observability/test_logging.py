"""Tests for shared observability logging."""

import logging
import time

import pytest

from nexus_matching.observability.logging import get_logger, log_duration


def test_get_logger_formats_utc_timestamps(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fixed = time.struct_time((2024, 6, 1, 9, 0, 5, 5, 153, 0))

    def fake_gmtime(_: float | None = None) -> time.struct_time:
        return fixed

    monkeypatch.setattr(time, "gmtime", fake_gmtime)

    logger = get_logger("nexus_matching.test.logging")
    logger.info("Index refreshed")

    captured = capsys.readouterr()
    assert (
        "2024-06-01T09:00:05+0000 INFO nexus_matching.test.logging: Index refreshed"
        in captured.err
    )


def test_get_logger_is_singleton_per_name() -> None:
    name = "nexus_matching.test.logging.singleton"
    logger = get_logger(name)
    logger_again = get_logger(name)

    assert logger is logger_again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_log_duration_appends_elapsed_milliseconds(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("nexus_matching.test.logging.duration")
    logger.setLevel(logging.DEBUG)

    with log_duration(logger, "Scored %d candidates", 12):
        pass

    captured = capsys.readouterr()
    assert "DEBUG nexus_matching.test.logging.duration: Scored 12 candidates (" in captured.err
    assert " ms)" in captured.err


def test_log_duration_logs_when_body_raises(capsys: pytest.CaptureFixture[str]) -> None:
    logger = get_logger("nexus_matching.test.logging.duration_error")
    logger.setLevel(logging.DEBUG)

    with pytest.raises(KeyError), log_duration(logger, "Refresh"):
        raise KeyError("p-1")

    assert "Refresh (" in capsys.readouterr().err
