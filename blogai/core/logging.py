"""Logging setup: readable log lines with structured extras rendered as JSON."""

import json
import logging
import sys

ROOT_LOGGER_NAME = "blogai"


class JSONExtrasFormatter(logging.Formatter):
    """Formatter that appends `extra={...}` fields to the line as JSON.

    Output format:
        2024-01-15 10:30:45 | INFO     | blogai.services.auto_tag | Tags applied {"post_id": "p1"}
    """

    RESERVED_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
        | {"message", "asctime", "taskName"}
    )

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        timestamp = self.formatTime(record, self.datefmt)
        line = f"{timestamp} | {record.levelname:<8} | {record.name} | {record.message}"

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.RESERVED_ATTRS and not key.startswith("_")
        }
        if extras:
            try:
                line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False)}"
            except (TypeError, ValueError):
                pass

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"

        return line


def setup_logging(*, debug: bool = False) -> None:
    """Attach a single stdout handler to the package logger."""
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False

    # Provider SDK request logs duplicate our own agent logs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
