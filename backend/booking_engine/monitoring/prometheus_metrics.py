"""
Prometheus metrics module for the booking engine.

Service timings are fed by the @measure_operation decorator; external
calendar calls are counted by outcome (ok, empty, error) so fail-open
degradation stays visible.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "booking_engine_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "booking_engine_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "booking_engine_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

calendar_calls_total = Counter(
    "booking_engine_calendar_calls_total",
    "External calendar calls by outcome",
    ["operation", "outcome"],  # outcome: ok | empty | error
    registry=REGISTRY,
)

bookings_total = Counter(
    "booking_engine_bookings_total",
    "Booking attempts by outcome",
    ["outcome"],  # pending | confirmed | a ValidationFailure code
    registry=REGISTRY,
)

appointment_transitions_total = Counter(
    "booking_engine_appointment_transitions_total",
    "Commands applied to existing appointments",
    ["command"],  # approve | reject | cancel | reschedule
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Recording helpers and text exposition for the booking engine registry."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'book')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_calendar_call(operation: str, outcome: str) -> None:
        """Count one external calendar call."""
        calendar_calls_total.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def record_booking(outcome: str) -> None:
        bookings_total.labels(outcome=outcome).inc()

    @staticmethod
    def record_transition(command: str) -> None:
        appointment_transitions_total.labels(command=command).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """
        Generate Prometheus metrics in exposition format.

        Returns:
            Metrics data in Prometheus text format
        """
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
