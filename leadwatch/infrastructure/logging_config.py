import logging
import json
import sys
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter so the monitor output can be shipped to a log
    aggregator (Render, Datadog, CloudWatch) without extra parsing.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Structured fields passed as logger.info(..., extra={"extra": {...}})
        if hasattr(record, "extra"):
            log_record.update(record.extra)  # type: ignore

        return json.dumps(log_record, default=str)


def setup_logging(json_output: bool = True, level: int = logging.INFO):
    """
    Configures the root logger for the whole service.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    # Drop existing handlers to avoid duplicated lines
    logger.handlers = []
    logger.addHandler(handler)

    # Quiet down chatty libraries
    logging.getLogger("uvicorn.access").handlers = []
    logging.getLogger("uvicorn.error").handlers = []
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)
