"""
Logging setup for pipeline runs.

Two output shapes are supported: one JSON object per line for cron and
container runs, and a short colored line for terminals. Both carry the
current run id, a short token bound for the length of one unit of work
(one scrape date, one roster batch) so its lines can be grepped together.
"""
import logging
import json
import sys
import uuid
from datetime import datetime
from typing import Any, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_run_id: ContextVar[str] = ContextVar("run_id", default="")

# Attributes every LogRecord has; anything else arrived through ``extra=``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: timestamp, level, logger, message, run_id, plus ``exception``
    when exc_info is set and ``extra`` for caller-supplied context.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": _run_id.get(),
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        context = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if context:
            payload["extra"] = context

        return json.dumps(payload, default=str)


class ColoredFormatter(logging.Formatter):
    """Level-colored single line for interactive use."""

    PALETTE = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.PALETTE.get(record.levelname, "")
        line = f"{color}{record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        run_id = _run_id.get()
        if run_id:
            line = f"{line} [run {run_id}]"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"

        return line


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    handler: logging.Handler | None = None,
    sql_echo: bool = False,
) -> None:
    """
    Replace the root logger's handlers with a single configured one.

    Args:
        level: Level name, case-insensitive; unknown names fall back to INFO
        json_output: JSONFormatter when True, ColoredFormatter otherwise
        handler: Destination; stdout when omitted
        sql_echo: Leave ``sqlalchemy.engine`` at INFO so statements are logged
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(numeric)

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(numeric)

    handler.setFormatter(JSONFormatter() if json_output else ColoredFormatter())
    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)


def get_run_id() -> str:
    """Run id bound to the current context, or ""."""
    return _run_id.get()


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """
    Bind a run id for the duration of the block.

    If one is already bound it is reused, so nested units of work log under
    the outermost id.
    """
    current = _run_id.get()
    if current:
        yield current
        return

    token = _run_id.set(run_id or uuid.uuid4().hex[:12])
    try:
        yield _run_id.get()
    finally:
        _run_id.reset(token)
