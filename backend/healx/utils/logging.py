import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Optional


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter; ``extra={...}`` keys land as top-level fields."""

    RESERVED = {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
        "process", "message", "asctime", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self.RESERVED and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    quiet_loggers: Optional[dict] = None,
) -> None:
    formatter_name = "json" if log_format.lower() == "json" else "standard"
    loggers = {
        name: {"level": level.upper()}
        for name, level in (quiet_loggers or {"sqlalchemy.engine": "WARNING"}).items()
    }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s",
                },
                "json": {
                    "()": "healx.utils.logging.JsonFormatter",
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": log_level.upper(),
                }
            },
            "loggers": loggers,
            "root": {
                "handlers": ["default"],
                "level": log_level.upper(),
            },
        }
    )
