"""Tests for moodboard.telemetry module."""

import importlib
import uuid
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from moodboard.telemetry import _get_tracer, annotate, generate_request_id, trace_span


class TestGenerateRequestId:
    def test_returns_valid_uuid4(self) -> None:
        rid = generate_request_id()
        parsed = uuid.UUID(rid, version=4)
        assert str(parsed) == rid

    def test_unique_per_call(self) -> None:
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100


class TestGetTracer:
    def test_returns_none_when_otel_missing(self) -> None:
        with patch("moodboard.telemetry._HAS_OTEL", False):
            assert _get_tracer() is None

    def test_returns_tracer_when_otel_available(self) -> None:
        mock_tracer = MagicMock()
        with (
            patch("moodboard.telemetry._HAS_OTEL", True),
            patch("moodboard.telemetry.trace") as mock_trace,
        ):
            mock_trace.get_tracer.return_value = mock_tracer
            assert _get_tracer() is mock_tracer
            mock_trace.get_tracer.assert_called_once_with("moodboard")

    def test_handles_non_import_error_during_import(self, monkeypatch: Any) -> None:
        telemetry = importlib.import_module("moodboard.telemetry")
        original_import_module = importlib.import_module

        with monkeypatch.context() as patch_context:

            def broken_import(name: str, package: str | None = None) -> Any:
                if name == "opentelemetry.trace":
                    raise AttributeError("broken opentelemetry install")
                return original_import_module(name, package)

            patch_context.setattr(importlib, "import_module", broken_import)
            reloaded = importlib.reload(telemetry)

        assert reloaded._HAS_OTEL is False
        assert reloaded._get_tracer() is None
        importlib.reload(telemetry)


class TestTraceSpan:
    def test_yields_none_when_no_otel(self) -> None:
        with patch("moodboard.telemetry._HAS_OTEL", False), trace_span("test") as span:
            assert span is None

    def test_creates_span_when_otel_available(self) -> None:
        mock_span = MagicMock()
        mock_tracer = MagicMock()
        mock_context = mock_tracer.start_as_current_span.return_value
        mock_context.__enter__.return_value = mock_span
        mock_context.__exit__.return_value = None

        with (
            patch("moodboard.telemetry._get_tracer", return_value=mock_tracer),
            trace_span("dispatch/ping", attributes={"moodboard.method": "ping"}) as span,
        ):
            assert span is mock_span
        mock_tracer.start_as_current_span.assert_called_once_with(
            "dispatch/ping", attributes={"moodboard.method": "ping"}
        )
        mock_context.__exit__.assert_called_once_with(None, None, None)

    def test_trace_span_catches_otel_exception(self) -> None:
        mock_tracer = MagicMock()
        mock_tracer.start_as_current_span.side_effect = RuntimeError("otel broken")

        with (
            patch("moodboard.telemetry._get_tracer", return_value=mock_tracer),
            trace_span("test") as span,
        ):
            assert span is None

    def test_body_exception_propagates_and_closes_span(self) -> None:
        mock_tracer = MagicMock()
        mock_context = mock_tracer.start_as_current_span.return_value
        mock_context.__exit__.return_value = None

        with (
            patch("moodboard.telemetry._get_tracer", return_value=mock_tracer),
            pytest.raises(ValueError, match="inner"),
            trace_span("test"),
        ):
            raise ValueError("inner")
        assert mock_context.__exit__.call_args.args[0] is ValueError


class TestAnnotate:
    def test_noop_without_span(self) -> None:
        annotate(None, error=1)

    def test_prefixes_attribute_names(self) -> None:
        span = MagicMock()
        annotate(span, error=0, tool="generate_mood_scene")
        span.set_attribute.assert_any_call("moodboard.error", 0)
        span.set_attribute.assert_any_call("moodboard.tool", "generate_mood_scene")

    def test_swallows_span_errors(self) -> None:
        span = MagicMock()
        span.set_attribute.side_effect = RuntimeError("span ended")
        annotate(span, error=1)

