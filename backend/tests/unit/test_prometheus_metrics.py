"""Prometheus exposition of service and calendar metrics."""

from booking_engine.monitoring.prometheus_metrics import prometheus_metrics


def test_calendar_calls_counted_by_outcome():
    prometheus_metrics.record_calendar_call("check_conflict", "error")
    output = prometheus_metrics.get_metrics().decode()
    assert (
        'booking_engine_calendar_calls_total{operation="check_conflict",outcome="error"}' in output
    )


def test_service_errors_counted_by_type():
    prometheus_metrics.record_service_operation(
        service="BookingService",
        operation="book",
        duration=0.01,
        status="error",
        error_type="RepositoryException",
    )
    output = prometheus_metrics.get_metrics().decode()
    assert "booking_engine_errors_total" in output
    assert 'error_type="RepositoryException"' in output


def test_content_type_is_text_exposition():
    assert prometheus_metrics.get_content_type().startswith("text/plain")


def test_booking_outcomes_and_transitions():
    prometheus_metrics.record_booking("OUT_OF_WINDOW")
    prometheus_metrics.record_transition("reschedule")
    output = prometheus_metrics.get_metrics().decode()
    assert 'booking_engine_bookings_total{outcome="OUT_OF_WINDOW"}' in output
    assert 'booking_engine_appointment_transitions_total{command="reschedule"}' in output
