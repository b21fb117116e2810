"""Tests for the OpenTelemetry tracing module."""

from unittest.mock import MagicMock

import pytest
from opentelemetry import trace

import cloubil.tracing as tracing_module
from cloubil.tracing import (
    add_cost_query_span_attributes,
    get_tracer,
    init_tracing,
    traced,
)


@pytest.fixture
def fresh_tracing():
    """Reset the module-level tracer so each test initializes cleanly."""
    tracing_module._tracer = None
    yield
    tracing_module._tracer = None


class TestTracingInitialization:
    """Tests for tracing initialization."""

    def test_init_tracing_returns_tracer(self, fresh_tracing):
        tracer = init_tracing(service_name="test-service")

        assert isinstance(tracer, trace.Tracer)

    def test_init_tracing_is_idempotent(self, fresh_tracing):
        tracer1 = init_tracing(service_name="test-service")
        tracer2 = init_tracing(service_name="test-service")

        assert tracer1 is tracer2

    def test_get_tracer_initializes_if_needed(self, fresh_tracing):
        tracer = get_tracer()

        assert tracer is not None
        assert tracing_module._tracer is tracer
        assert get_tracer() is tracer


class TestTracedDecorator:
    """Tests for the @traced decorator."""

    def test_traced_returns_result(self, fresh_tracing):
        @traced(name="test_operation", attributes={"component": "test"})
        def double(x: int) -> int:
            return x * 2

        assert double(5) == 10
        assert double.__name__ == "double"

    def test_traced_reraises(self, fresh_tracing):
        @traced()
        def failing():
            raise ValueError("Test error")

        with pytest.raises(ValueError, match="Test error"):
            failing()


class TestCostQuerySpanAttributes:
    """Tests for add_cost_query_span_attributes."""

    def test_sets_only_given_attributes(self):
        span = MagicMock()

        add_cost_query_span_attributes(span, operation="GetCostAndUsage", amount="1.23")

        span.set_attribute.assert_any_call("cost_query.operation", "GetCostAndUsage")
        span.set_attribute.assert_any_call("cost_query.amount", "1.23")
        assert span.set_attribute.call_count == 2

    def test_all_attributes(self):
        span = MagicMock()

        add_cost_query_span_attributes(
            span,
            operation="GetCostAndUsage",
            region="us-east-1",
            period_start="2023-01-01",
            period_end="2023-02-01",
            amount="9.99",
        )

        assert span.set_attribute.call_count == 5
