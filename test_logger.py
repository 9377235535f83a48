#!/usr/bin/env python3
"""
Tests for logging setup and job reports.
"""

import logging
from datetime import datetime

from photocollate.layout import Dimension, pack_grid
from photocollate.logger import log_job, log_layout_calculation, setup_logging


def test_setup_logging_writes_debug_file(tmp_path, restore_root_logging):
    log_file = tmp_path / "debug.log"
    setup_logging(log_file)

    logging.debug("debug goes to the file only")
    logging.info("info goes to both")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "Logging initialized" in content
    assert "debug goes to the file only" in content
    assert "info goes to both" in content


def test_setup_logging_console_is_info(tmp_path, restore_root_logging, capsys):
    setup_logging(tmp_path / "debug.log")

    logging.debug("hidden on console")
    logging.warning("shown on console")

    out = capsys.readouterr().out
    assert "WARNING: shown on console" in out
    assert "hidden on console" not in out


def test_log_layout_calculation(caplog):
    arr = pack_grid(Dimension(600, 400), Dimension(60, 100), gap=5)
    with caplog.at_level(logging.INFO, logger="photocollate.logger"):
        log_layout_calculation(arr, 0.0012)

    text = caplog.text
    assert "Grid: 6 columns x 5 rows" in text
    assert "(rotated)" in text
    assert "Copies: 30" in text


def test_log_job_success(tmp_path):
    arr = pack_grid(Dimension(576, 384), Dimension(58, 96), gap=5)
    report = tmp_path / "job.txt"

    log_job(report, tmp_path / "photo.jpg", datetime(2026, 1, 2, 3, 4, 5),
            (6, 4), (0.6, 1), 96, 5, arr, tmp_path / "sheet.jpg", 0.25)

    content = report.read_text(encoding="utf-8")
    assert "Status: SUCCESS" in content
    assert "Timestamp: 2026-01-02 03:04:05" in content
    assert "Paper: 6 x 4 in" in content
    assert "Copies: 30" in content
    assert "Sheet Rotated: yes" in content
    assert "Error Information" not in content


def test_log_job_error(tmp_path):
    report = tmp_path / "job.txt"

    log_job(report, None, datetime.now(), (6, 4), (7, 1), 96, 5, None, None, 0.0,
            error="no copies fit on the sheet")

    content = report.read_text(encoding="utf-8")
    assert "Status: ERROR" in content
    assert "Layout:" not in content
    assert "Error: no copies fit on the sheet" in content


def test_log_job_unwritable_path_logs_error(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        log_job(tmp_path / "missing" / "job.txt", None, datetime.now(), (6, 4), (0.6, 1),
                96, 5, None, None, 0.0)

    assert any("Failed to write job report" in r.message for r in caplog.records)
