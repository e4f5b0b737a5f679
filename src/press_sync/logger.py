import json
import logging
import os
import sys

TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured debug output.

    Produces one JSON object per log record with fields: ts, level, logger, msg.
    Exception info is included as an "exc" field when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _formatter(debug_format: str, fmt: str) -> logging.Formatter:
    if debug_format == "json":
        return JsonFormatter(datefmt=DATE_FORMAT)
    return logging.Formatter(fmt, datefmt=DATE_FORMAT)


def setup_logging(
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure process logging for a sync run.

    Log records go to stderr so stdout stays free for the report. When
    a log_file is given, records are also appended to it.

    Args:
        debug: If True, overrides every other level source with DEBUG.
        log_file: Optional log file path.
        debug_format: "text" (default) or "json" for structured output.
        level: Level name from config; LOG_LEVEL env var takes precedence.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Default: INFO.
    """
    env_level = os.getenv("LOG_LEVEL", level or "INFO").upper()

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, env_level, logging.INFO)

    handlers: list[logging.Handler] = []
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_formatter(debug_format, TEXT_FORMAT))
    handlers.append(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(_formatter(debug_format, FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
    )

    # Silence third-party libs unless DEBUG
    if log_level != logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("requests").setLevel(logging.WARNING)
        logging.getLogger("charset_normalizer").setLevel(logging.WARNING)
