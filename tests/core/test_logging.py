from __future__ import annotations

import logging

from courseflow.core.logging import _ContainerFormatter, setup_logging


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_replaces_handlers() -> None:
    setup_logging("info")
    setup_logging("info")
    assert len(logging.getLogger().handlers) == 1


def _record(level: int, msg: str, lineno: int = 1) -> logging.LogRecord:
    return logging.LogRecord(
        name="courseflow.services.proposal_service",
        level=level,
        pathname="proposal_service.py",
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, "hello"))
    assert "hello" in output
    assert "[proposal_service.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "denied", 42))
    assert "denied" in output
    assert "[proposal_service.py:42]" in output


def test_formatter_timestamp_is_utc_with_milliseconds() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, "tick"))
    timestamp = output.split(" ", 1)[0]
    # 2024-01-01T00:00:00.123Z
    assert timestamp.endswith("Z")
    assert len(timestamp.split(".")[1]) == 4


def test_formatter_appends_workflow_context() -> None:
    record = _record(logging.INFO, "Proposal submit")
    record.entity = "proposal"
    record.entity_id = 42
    record.action = "submit"
    record.actor_id = 7
    output = _ContainerFormatter().format(record)
    assert output.endswith("{proposal#42 submit by 7}")


def test_formatter_without_workflow_context_has_no_braces() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, "plain"))
    assert "{" not in output
