"""Span helpers for the workflow engine."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

P = ParamSpec("P")
R = TypeVar("R")

_tracer = trace.get_tracer("automation")

# Call arguments copied onto spans. Record payloads are never recorded.
_SPAN_ARGUMENTS = frozenset({
    "rule_id", "organization_id", "object_type", "trigger_type", "changed_fields",
})


def _span_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def traced(
    span_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Run a coroutine function inside a span named ``span_name``.

    Keyword arguments in the allowlist are set as ``arg.<name>`` attributes.
    An exception marks the span as failed and is re-raised.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"traced() needs a coroutine function, got {func!r}")

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with _tracer.start_as_current_span(span_name) as span:
                for key, value in kwargs.items():
                    if key in _SPAN_ARGUMENTS and value is not None:
                        span.set_attribute(f"arg.{key}", _span_value(value))
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def set_span_error(exception: Exception) -> None:
    """Mark the current span as failed without raising."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_status(Status(StatusCode.ERROR, str(exception)))
        span.record_exception(exception)
