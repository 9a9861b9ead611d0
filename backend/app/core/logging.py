import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Which process wrote the line: api / scheduler / worker / cli
_process_name: Optional[str] = None


class JSONFormatter(logging.Formatter):
    """One JSON object per line; extra fields go under "data" """

    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "process": _process_name,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data = getattr(record, "extra_data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(debug: bool = False, process: str = "api"):
    """Route the root logger to stdout as JSON. Called once per process."""
    global _process_name
    _process_name = process

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.handlers.clear()
    root.addHandler(handler)

    for name, level in (
        ("sqlalchemy.engine", logging.WARNING),
        ("apscheduler", logging.WARNING),
        ("httpx", logging.WARNING),
        ("uvicorn.access", logging.INFO),
    ):
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_counts(logger: logging.Logger, message: str, **counts) -> None:
    """INFO line with the counts attached as structured data"""
    logger.info(message, extra={"extra_data": counts})
