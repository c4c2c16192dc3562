"""Tests for logging helpers."""

import json
import logging

from stats_repository.utils import StructuredFormatter, get_contextual_logger, setup_logging


def test_structured_formatter_includes_context():
    record = logging.LogRecord(
        name="stats", level=logging.INFO, pathname=__file__, lineno=1,
        msg="altered %s", args=("amount",), exc_info=None,
    )
    record.stats_context = {"table_id": 100}

    data = json.loads(StructuredFormatter().format(record))

    assert data["message"] == "altered amount"
    assert data["level"] == "INFO"
    assert data["table_id"] == 100


def test_contextual_logger_prefixes_messages(caplog):
    logger = get_contextual_logger("stats_repository.test", {"table_id": 100, "column": "amount"})

    with caplog.at_level(logging.INFO, logger="stats_repository.test"):
        logger.info("Altered statistics")

    assert "[table_id=100 column=amount] Altered statistics" in caplog.text
    assert caplog.records[0].stats_context == {"table_id": 100, "column": "amount"}


def test_setup_logging_sets_level(tmp_path):
    log_file = tmp_path / "stats.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        setup_logging(level="DEBUG", structured=True, log_file=str(log_file))
        logging.getLogger("stats_repository.test").debug("hello")

        assert root.level == logging.DEBUG
        assert logging.getLogger("sqlglot").level == logging.WARNING
        for handler in root.handlers:
            handler.flush()
        assert json.loads(log_file.read_text().splitlines()[-1])["message"] == "hello"
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
