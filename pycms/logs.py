"""Rendering of serverless function execution logs.

The API returns log records in three flavours, distinguished by ``status``:
successful executions carry the function's console output in ``log``, handled
and unhandled errors carry an ``error`` object with a stack trace. Each record
is rendered as a header line, optionally followed by a body.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import click

from .exceptions import LogClassificationError
from .output import OutputFormatter
from .utils import TimestampValue, format_iso_timestamp

logger = logging.getLogger(__name__)

SEPARATOR = " - "
NO_LOGS_MESSAGE = "No logs found."

LogResponse = Union[dict[str, Any], list[dict[str, Any]], None]


class LogStatus(str, Enum):
    """Outcome of a function execution."""

    SUCCESS = "SUCCESS"
    HANDLED_ERROR = "HANDLED_ERROR"
    UNHANDLED_ERROR = "UNHANDLED_ERROR"


class DisplayStyle(Enum):
    """Terminal style of a status label."""

    SUCCESS = "success"
    ERROR = "error"


_STYLE_COLORS = {
    DisplayStyle.SUCCESS: "green",
    DisplayStyle.ERROR: "red",
}


@dataclass
class RenderOptions:
    """How log records are rendered."""

    compact: bool = False
    """Only show the header line of each record"""

    header_insertion: Optional[str] = None
    """Extra text placed in the header between status and execution time"""


@dataclass
class LogError:
    """Error details of a failed execution."""

    type: str
    message: str
    stack_trace: list[list[str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogError":
        return cls(
            type=data["type"],
            message=data["message"],
            stack_trace=data.get("stackTrace") or [],
        )


@dataclass
class LogRecord:
    """A single classified execution log."""

    status: LogStatus
    created_at: TimestampValue
    execution_time: int
    log: Optional[str] = None
    error: Optional[LogError] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogRecord":
        """Build a record from an API response item.

        Raises:
            LogClassificationError: If the status is not a known outcome
            KeyError: If a field required for the status is missing
        """
        status = classify_log(data)
        error = None
        if status is not LogStatus.SUCCESS:
            error = LogError.from_dict(data["error"])
        return cls(
            status=status,
            created_at=data["createdAt"],
            execution_time=data["executionTime"],
            log=data.get("log"),
            error=error,
        )


def classify_log(data: dict[str, Any]) -> LogStatus:
    """Get the outcome kind of a raw log record.

    Raises:
        LogClassificationError: If ``status`` is missing or unknown
    """
    status = data.get("status") if isinstance(data, dict) else None
    try:
        return LogStatus(status)
    except ValueError:
        raise LogClassificationError(status) from None


def style_for_status(status: LogStatus) -> DisplayStyle:
    """Both error kinds share the error style."""
    if status is LogStatus.SUCCESS:
        return DisplayStyle.SUCCESS
    if status in (LogStatus.HANDLED_ERROR, LogStatus.UNHANDLED_ERROR):
        return DisplayStyle.ERROR
    raise LogClassificationError(status)


def format_header(record: LogRecord, options: RenderOptions) -> str:
    color = _STYLE_COLORS[style_for_status(record.status)]
    parts = [
        click.style(format_iso_timestamp(record.created_at), fg="bright_white"),
        click.style(record.status.value, fg=color),
    ]
    if options.header_insertion:
        parts.append(options.header_insertion)
    parts.append(
        f"{click.style('Execution Time:', fg='bright_white')} "
        f"{record.execution_time}ms"
    )
    return SEPARATOR.join(parts)


def format_stack_trace(error: LogError) -> list[str]:
    """Format the first stack trace array, one ``  at`` line per frame."""
    frames = error.stack_trace[0] if error.stack_trace else []
    return [f"  at {frame}" for frame in frames]


def format_error(error: LogError) -> str:
    return "\n".join([f"{error.type}: {error.message}", *format_stack_trace(error)])


def format_body(record: LogRecord) -> str:
    if record.status is LogStatus.SUCCESS:
        return record.log or ""
    if record.status in (LogStatus.HANDLED_ERROR, LogStatus.UNHANDLED_ERROR):
        if record.error is None:
            raise ValueError(f"{record.status.value} record has no error details")
        return format_error(record.error)
    raise LogClassificationError(record.status)


def render_log(
    record: Union[LogRecord, dict[str, Any]],
    options: Optional[RenderOptions] = None,
) -> str:
    """Render one log record.

    Args:
        record: Classified record or raw API dict
        options: Rendering options

    Returns:
        Header line, followed by the body unless ``options.compact``

    Raises:
        LogClassificationError: If the record's status is unknown
    """
    options = options or RenderOptions()
    if not isinstance(record, LogRecord):
        record = LogRecord.from_dict(record)

    header = format_header(record, options)
    if options.compact:
        return header
    return f"{header}\n{format_body(record)}"


def _process_log(raw: dict[str, Any], options: RenderOptions) -> Optional[str]:
    try:
        return render_log(raw, options)
    except (
        LogClassificationError,
        KeyError,
        TypeError,
        ValueError,
        OverflowError,
    ) as e:
        try:
            dumped = json.dumps(raw, default=str)
        except (TypeError, ValueError):
            dumped = repr(raw)
        logger.warning(f"Unable to process log {dumped}: {e}")
        return None


def render_logs(response: LogResponse, options: Optional[RenderOptions] = None) -> str:
    """Render a log API response.

    Args:
        response: A single record, a ``{"results": [...]}`` wrapper, a list of
            records, or None
        options: Rendering options

    Returns:
        Rendered records joined by newlines, or "No logs found." when there
        are none. Records that cannot be processed are skipped.
    """
    options = options or RenderOptions()

    if not response:
        return NO_LOGS_MESSAGE

    if isinstance(response, dict) and "results" in response:
        records = response.get("results") or []
    elif isinstance(response, list):
        records = response
    else:
        records = [response]

    if not records:
        return NO_LOGS_MESSAGE

    rendered = [_process_log(raw, options) for raw in records]
    return "\n".join(text for text in rendered if text is not None)


def output_logs(
    out: OutputFormatter,
    response: LogResponse,
    options: Optional[RenderOptions] = None,
) -> None:
    """Render a log API response and print it."""
    out.print(render_logs(response, options))
