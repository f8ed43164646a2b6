#!/usr/bin/env python3
"""Tests for logging setup."""

import logging

from fleet import Config
from fleet import log


def test_configure_logging_writes_to_data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(log, "_configured", False)
    root = logging.getLogger()
    old_handlers, old_level = list(root.handlers), root.level
    try:
        log.configure_logging(Config(data_dir=tmp_path, log_level="debug"))
        logging.getLogger("fleet.test").info("vehicle saved")
        for handler in root.handlers:
            handler.flush()
        assert "| INFO     | fleet.test | vehicle saved" in (tmp_path / "fleet.log").read_text()

        # configured once per process
        count = len(root.handlers)
        log.configure_logging(Config(data_dir=tmp_path))
        assert len(root.handlers) == count
    finally:
        for handler in list(root.handlers):
            if handler not in old_handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(old_level)
