"""Optional OpenTelemetry spans for request dispatch; no-ops when OTel is absent."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from importlib import import_module
from typing import Any

logger = logging.getLogger("moodboard.telemetry")

trace: Any | None = None
try:
    trace = import_module("opentelemetry.trace")
    _HAS_OTEL = True
except Exception:
    _HAS_OTEL = False

_TRACER_NAME = "moodboard"


def _get_tracer() -> Any:
    if _HAS_OTEL and trace is not None:
        return trace.get_tracer(_TRACER_NAME)
    return None


def generate_request_id() -> str:
    """UUID4 used to correlate log lines and spans for one dispatched request."""
    return str(uuid.uuid4())


def annotate(span: Any, **attributes: Any) -> None:
    """Set attributes on ``span`` if there is one. Never raises."""
    if span is None:
        return
    for key, value in attributes.items():
        try:
            span.set_attribute(f"moodboard.{key}", value)
        except Exception as exc:
            logger.debug("Failed to set span attribute %s: %s", key, exc)


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Any, None, None]:
    """Open an OTel span named ``name``, or yield None when tracing is unavailable.

    Errors raised by the tracer itself are logged at debug level and never
    reach the caller. Errors raised inside the ``with`` block propagate.
    """
    try:
        tracer = _get_tracer()
    except Exception as exc:
        logger.debug("OpenTelemetry unavailable for span '%s': %s", name, exc)
        yield None
        return

    if tracer is None:
        yield None
        return

    try:
        span_context = tracer.start_as_current_span(name, attributes=attributes or {})
        span = span_context.__enter__()
    except Exception as exc:
        logger.debug("OpenTelemetry unavailable for span '%s': %s", name, exc)
        yield None
        return

    try:
        yield span
    except Exception as inner_exc:
        try:
            span_context.__exit__(type(inner_exc), inner_exc, inner_exc.__traceback__)
        except Exception as exit_exc:
            logger.debug("Failed to close span '%s': %s", name, exit_exc)
        raise
    else:
        try:
            span_context.__exit__(None, None, None)
        except Exception as exit_exc:
            logger.debug("Failed to close span '%s': %s", name, exit_exc)
