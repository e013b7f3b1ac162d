"""Structured logging for workbook operations.

Log lines carry the workbook and worksheet being processed. Both live in
context variables, so nested loads and exports of different workbooks do
not mix up their context.

Usage:
    from spreadsheet_document_engine.utils.logging import LogContext, get_logger

    logger = get_logger(__name__)

    with LogContext(workbook="report.xlsx", worksheet="Sheet1"):
        logger.info("Loading cells", count=120)

The library only creates loggers. Handlers are installed by the embedding
application, for example with ``configure_logging``.
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from spreadsheet_document_engine.config import settings

_workbook_var: ContextVar[str | None] = ContextVar("workbook", default=None)
_worksheet_var: ContextVar[str | None] = ContextVar("worksheet", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)

_COUNTER_FIELDS = ("worksheets_processed", "cells_processed", "styles_registered")


def get_workbook_name() -> str | None:
    """Name or path of the workbook in the current context, if any."""
    return _workbook_var.get()


def set_workbook_name(name: str | None) -> None:
    _workbook_var.set(name)


def get_worksheet_name() -> str | None:
    return _worksheet_var.get()


def set_worksheet_name(name: str | None) -> None:
    _worksheet_var.set(name)


def get_extra_context() -> dict[str, Any]:
    """Additional key-value pairs of the current context (never None)."""
    return _extra_context_var.get() or {}


def set_extra_context(context: dict[str, Any]) -> None:
    _extra_context_var.set(context)


def clear_context() -> None:
    set_workbook_name(None)
    set_worksheet_name(None)
    _extra_context_var.set(None)


def _context_pairs() -> list[str]:
    pairs = []
    workbook = get_workbook_name()
    if workbook:
        pairs.append(f"workbook={workbook}")
    worksheet = get_worksheet_name()
    if worksheet:
        pairs.append(f"worksheet={worksheet}")
    pairs.extend(f"{key}={value}" for key, value in get_extra_context().items())
    return pairs


@dataclass
class PerformanceMetrics:
    """Counters and timing of one bulk operation (load, export, read, write).

    Attributes:
        operation: Operation name, e.g. ``"load_workbook"``.
        start_time: UTC start timestamp.
        end_time: UTC end timestamp, set by ``finish``.
        duration_seconds: Elapsed time, set by ``finish``.
        worksheets_processed: Worksheets handled.
        cells_processed: Cells handled.
        styles_registered: Canonical styles in the style table.
        custom_metrics: Free-form additional values.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    worksheets_processed: int = 0
    cells_processed: int = 0
    styles_registered: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Operation and duration plus every counter that is not zero."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        for name in _COUNTER_FIELDS:
            count = getattr(self, name)
            if count > 0:
                result[name] = count
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogFormatter(logging.Formatter):
    """Formatter prefixing each message with the current workbook context.

    A record logged while loading ``Sheet1`` of ``report.xlsx`` renders as
    ``[workbook=report.xlsx worksheet=Sheet1] Loaded worksheet``.
    """

    def format(self, record: logging.LogRecord) -> str:
        pairs = _context_pairs()
        if not pairs:
            return super().format(record)
        original = record.msg
        record.msg = f"[{' '.join(pairs)}] {original}"
        try:
            return super().format(record)
        finally:
            record.msg = original


class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` taking structured keyword data.

    ``logger.info("Merged cells", range="A1:B2")`` logs
    ``"Merged cells | range=A1:B2"``.
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message
        pairs = ", ".join(f"{key}={value}" for key, value in kwargs.items())
        return f"{message} | {pairs}"

    def debug(self, message: str, **kwargs: Any) -> None:
        # Model mutations log at DEBUG on hot paths; skip formatting when off
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self._logger.exception(self._build_message(message, **kwargs))

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        self.info(f"Performance: {metrics.operation}", **metrics.to_dict())

    def log_progress(
        self,
        stage: str,
        current: int,
        total: int,
        details: str | None = None,
    ) -> None:
        """Log ``current`` of ``total`` items of a stage with a percentage."""
        percentage = current / total * 100 if total > 0 else 0.0
        data: dict[str, Any] = {
            "current": current,
            "total": total,
            "percentage": f"{percentage:.1f}%",
        }
        if details:
            data["details"] = details
        self.info(f"Progress: {stage}", **data)


class LogContext:
    """Temporarily set the workbook, worksheet and extra log context.

    ``workbook`` and ``worksheet`` go to their own variables; every other
    keyword is merged into the extra context. Everything is restored on
    exit, also when the block raises.

    Usage:
        with LogContext(workbook="book.xlsx", worksheet="Sheet1"):
            logger.info("Processing...")
    """

    def __init__(self, **kwargs: Any) -> None:
        self._workbook = kwargs.pop("workbook", None)
        self._worksheet = kwargs.pop("worksheet", None)
        self._extra = kwargs
        self._tokens: list[tuple[ContextVar[Any], Token[Any]]] = []

    def __enter__(self) -> "LogContext":
        if self._workbook is not None:
            self._tokens.append((_workbook_var, _workbook_var.set(self._workbook)))
        if self._worksheet is not None:
            self._tokens.append((_worksheet_var, _worksheet_var.set(self._worksheet)))
        merged = {**get_extra_context(), **self._extra}
        self._tokens.append((_extra_context_var, _extra_context_var.set(merged)))
        return self

    def __exit__(self, *args: Any) -> None:
        while self._tokens:
            variable, token = self._tokens.pop()
            variable.reset(token)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Time a bulk operation and log its metrics when the block ends.

    Usage:
        with timed_operation(logger, "load_workbook") as metrics:
            metrics.cells_processed = 1000

    The metrics are logged even if the block raises.
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


class ProgressTracker:
    """Log the progress of a sequence of items, e.g. worksheets of a load.

    Usage:
        tracker = ProgressTracker(logger, "Loading worksheets", total=3)
        for sheet in sheets:
            load(sheet)
            tracker.update(details=sheet.name)
        tracker.complete()
    """

    def __init__(
        self,
        logger: StructuredLogger,
        stage: str,
        total: int,
        log_interval: int = 1,
    ) -> None:
        """
        Args:
            logger: Logger receiving the progress lines.
            stage: Label of the tracked stage.
            total: Number of items expected.
            log_interval: Log every n-th update; the last update always logs.
        """
        self._logger = logger
        self._stage = stage
        self._total = total
        self._log_interval = max(log_interval, 1)
        self._current = 0
        self._started = time.monotonic()

    @property
    def current(self) -> int:
        return self._current

    def update(self, increment: int = 1, details: str | None = None) -> None:
        self._current += increment
        due = self._current % self._log_interval == 0
        if due or self._current >= self._total:
            self._logger.log_progress(self._stage, self._current, self._total, details)

    def complete(self) -> float:
        """Log a summary line and return the elapsed seconds."""
        duration = time.monotonic() - self._started
        self._logger.info(
            f"Completed: {self._stage}",
            total_items=self._total,
            duration_seconds=f"{duration:.2f}",
        )
        return duration


def configure_logging(
    level: int | str | None = None,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Install a single stream handler on the root logger.

    Existing root handlers are removed first, so repeated calls do not
    duplicate output.

    Args:
        level: Level as int or name (case-insensitive); defaults to
            ``settings.log_level_int``.
        format_string: ``logging`` format string; a timestamped default is used
            when omitted.
        use_structured_formatter: Prefix records with the workbook context.
    """
    if level is None:
        level = settings.log_level_int
    elif isinstance(level, str):
        level = logging.getLevelName(level.upper())
    fmt = format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = StructuredLogFormatter(fmt) if use_structured_formatter else logging.Formatter(fmt)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Structured logger for a module; pass ``__name__``."""
    return StructuredLogger(name)
