# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Logging setup for the command-line application.

Log records are written as one JSON object per line to rotating files:

- app.log     : every record at the configured level and above,
- errors.log  : ERROR and above,
- reports.log : report computations (logger 'smb_profitsight.report').

Library modules only create module-level loggers; handlers are installed by
the CLI through :func:`setup_logging`.
"""

from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

MAX_BYTES = 2_000_000
BACKUP_COUNT = 5
REPORT_LOGGER = "smb_profitsight.report"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _handler(path: Path, level: int) -> RotatingFileHandler:
    fh = RotatingFileHandler(
        path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    fh.setFormatter(JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    fh.setLevel(level)
    return fh


def parse_level(name: str) -> int:
    """Map a level name ('debug', 'INFO', ...) to its logging constant."""
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def _attach(logger: logging.Logger, path: Path, level: int) -> None:
    """Add a rotating JSON handler for `path` unless one is already attached."""
    target = os.path.abspath(path)
    if any(getattr(h, "baseFilename", None) == target for h in logger.handlers):
        return
    logger.addHandler(_handler(path, level))


def setup_logging(logs_dir: Path, level: int = logging.INFO) -> None:
    """
    Install the JSON log files under `logs_dir`.

    app.log and errors.log go on the root logger only when the root has no
    handler yet, so an embedding application keeps its own configuration.
    reports.log is always installed on 'smb_profitsight.report'. Calling
    this again with the same directory adds no duplicate handler.
    """
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        _attach(root, logs_dir / "app.log", level)
        _attach(root, logs_dir / "errors.log", logging.ERROR)

    report_logger = logging.getLogger(REPORT_LOGGER)
    _attach(report_logger, logs_dir / "reports.log", level)
    report_logger.setLevel(level)
