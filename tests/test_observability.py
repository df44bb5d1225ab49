from __future__ import annotations

import json
import logging

import pytest

from cmdexec.util.logging import (
    ROOT_LOGGER_NAME,
    configure_logging,
    get_logger,
    normalize_level,
)
from cmdexec.util.observability import EventLogger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_event_logger_emits_json(caplog) -> None:
    logger = EventLogger("cmdexec.test.events")
    caplog.set_level(logging.INFO, logger="cmdexec.test.events")

    logger.log("sample.event", {"value": 42})

    assert caplog.records
    payload = json.loads(caplog.records[-1].message)
    assert payload["event_type"] == "sample.event"
    assert payload["payload"]["value"] == 42
    assert caplog.records[-1].event_payload == {"value": 42}


def test_event_logger_nests_foreign_names_under_root(caplog) -> None:
    caplog.set_level(logging.INFO, logger=ROOT_LOGGER_NAME)

    EventLogger("plugin").log("sample.event", {})

    assert caplog.records[-1].name == "cmdexec.plugin"


def test_bind_returns_new_logger() -> None:
    base = EventLogger("cmdexec.test.events", {"service": "x"})

    bound = base.bind(command=["true"])

    assert base.context == {"service": "x"}
    assert bound.context == {"service": "x", "command": ["true"]}


def test_named_logger_keeps_context(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="cmdexec.test.events")
    logger = EventLogger("cmdexec.test.events").bind(run=1).named("exit")

    logger.log("done", {}, level="error")

    record = caplog.records[-1]
    assert record.name == "cmdexec.test.events.exit"
    assert record.levelno == logging.ERROR
    assert json.loads(record.message)["context"] == {"run": 1}


def test_get_logger_places_names_under_root() -> None:
    assert get_logger("command").name == "cmdexec.command"
    assert get_logger("cmdexec.command.exit").name == "cmdexec.command.exit"
    assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME


def test_configure_logging_sets_root_level_once(restore_root_logger) -> None:
    configure_logging("INFO")
    root = configure_logging("debug")

    assert root is restore_root_logger
    assert root.level == logging.DEBUG
    installed = [h for h in root.handlers if type(h).__name__ == "_StderrHandler"]
    assert len(installed) == 1


def test_configured_handler_writes_to_current_stderr(restore_root_logger, capsys) -> None:
    configure_logging("INFO", fmt="%(name)s:%(message)s")

    get_logger("command.exit").info("finished")

    assert "cmdexec.command.exit:finished" in capsys.readouterr().err


def test_normalize_level_falls_back_to_info() -> None:
    assert normalize_level(" debug ") == logging.DEBUG
    assert normalize_level("warn") == logging.WARNING
    assert normalize_level("verbose") == logging.INFO
