"""
Optional loguru logging setup for applications using the client.

The library itself only logs through ``logging.getLogger(__name__)``.
Calling ``configure_logging`` routes those records (and every other stdlib
logging call) through loguru with a simplified JSON sink on stderr.
"""

import json
import logging
import sys
import traceback
from types import FrameType
from typing import Optional, Union

from loguru import logger


class InterceptHandler(logging.Handler):
    """
    Handler that intercepts standard logging calls and redirects them to loguru.
    """

    def emit(self, record: logging.LogRecord):
        """Intercept standard logging record and pass to loguru."""
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logging call originated
        frame: Optional[FrameType] = sys._getframe(0)
        depth = 0

        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def build_simplified_json_record(record) -> dict:
    """
    Build a simplified JSON log record from a loguru record.

    Only includes timestamp, level, logger name, message and exception.
    """
    log_record = {
        "timestamp": record["time"].strftime("%Y-%m-%d %H:%M:%S"),
        "level": record["level"].name,
        "logger": record["extra"].get("logger_name", record["name"]),
        "message": record["message"],
    }

    if record["exception"]:
        traceback_text = None
        if record["exception"].traceback:
            traceback_text = "".join(
                traceback.format_exception(
                    record["exception"].type,
                    record["exception"].value,
                    record["exception"].traceback,
                )
            ).strip()

        log_record["exception"] = {
            "type": (
                record["exception"].type.__name__ if record["exception"].type else None
            ),
            "value": (
                str(record["exception"].value) if record["exception"].value else None
            ),
            "traceback": traceback_text,
        }
    else:
        log_record["exception"] = None

    return log_record


def custom_json_sink(message):
    """Write each record to stderr as one line of JSON."""
    sys.stderr.write(json.dumps(build_simplified_json_record(message.record)) + "\n")


def configure_logging(level: Union[str, int] = "INFO"):
    """
    Configure loguru and intercept stdlib logging.

    Args:
        level: Minimum level for emitted records (e.g. "DEBUG", "INFO")
    """
    logger.remove()
    logger.add(custom_json_sink, level=level, backtrace=True, diagnose=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.debug("Logging configured with loguru")
