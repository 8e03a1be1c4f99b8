# backend/booking_engine/services/booking_service.py
"""
Booking Service for the booking engine.

Orchestrates the appointment lifecycle:
- book: validate, decide pending vs confirmed, persist
- approve / reject / cancel: status transitions with timestamps and reasons
- reschedule: re-validate the new interval excluding the appointment itself

Writes for one instructor run under a timeline lock and, on PostgreSQL, an
exclusion constraint; a concurrent double booking surfaces as a conflict.
After commit the appointment is mirrored to the external calendar and a
notification event is published. Neither side effect can fail the call.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import APPOINTMENT_CONFLICT_REASON, MAX_REASON_LENGTH
from ..core.exceptions import (
    BookingConflictException,
    DomainException,
    InvalidStatusTransitionException,
    NotFoundException,
    OutOfWindowException,
    PolicyViolationException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc
from ..events.booking_events import (
    AppointmentApproved,
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentRejected,
    AppointmentRescheduled,
)
from ..events.publisher import EventPublisher
from ..models.appointment import Appointment, AppointmentStatus, PaymentStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.appointment_repository import AppointmentRepository
from ..repositories.appointment_type_repository import AppointmentTypeRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingExtras, BookingResult, ValidationFailure, ValidationResult
from .base import BaseService
from .booking_validator import BookingValidator
from .calendar_sync_service import CalendarSyncService
from .pricing import calculate_price

logger = logging.getLogger(__name__)


def validation_exception(result: ValidationResult) -> DomainException:
    """Domain exception matching a failed ValidationResult."""
    reason = result.reason or "Booking request is not valid"
    if result.code == ValidationFailure.NOT_FOUND:
        return NotFoundException(reason)
    if result.code == ValidationFailure.POLICY_VIOLATION:
        return PolicyViolationException(reason)
    if result.code == ValidationFailure.CONFLICT:
        return BookingConflictException(reason)
    if result.code == ValidationFailure.OUT_OF_WINDOW:
        return OutOfWindowException(reason)
    return ValidationException(reason)


class BookingService(BaseService):
    """
    Booking orchestrator.

    Validation failures on book are returned as BookingResult; commands on an
    existing appointment raise domain exceptions.
    """

    def __init__(
        self,
        db: Session,
        validator: Optional[BookingValidator] = None,
        calendar_sync: Optional[CalendarSyncService] = None,
        event_publisher: Optional[EventPublisher] = None,
        appointment_repository: Optional[AppointmentRepository] = None,
        appointment_type_repository: Optional[AppointmentTypeRepository] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            validator: Booking validator; built from the session when omitted
            calendar_sync: Calendar mirror; shared with the default validator
            event_publisher: Notification event publisher
            appointment_repository: Optional AppointmentRepository instance
            appointment_type_repository: Optional AppointmentTypeRepository instance
        """
        super().__init__(db)
        self.calendar_sync = calendar_sync or CalendarSyncService(db)
        self.validator = validator or BookingValidator(db, calendar_sync=self.calendar_sync)
        self.event_publisher = event_publisher or EventPublisher()
        self.appointment_repository = (
            appointment_repository or RepositoryFactory.create_appointment_repository(db)
        )
        self.appointment_type_repository = (
            appointment_type_repository or RepositoryFactory.create_appointment_type_repository(db)
        )

    @BaseService.measure_operation("book")
    def book(
        self,
        instructor_id: str,
        student_id: Optional[str],
        appointment_type_id: str,
        start_time: datetime,
        end_time: datetime,
        extras: Optional[BookingExtras] = None,
    ) -> BookingResult:
        """
        Validate and commit a booking.

        Args:
            instructor_id: Instructor being booked
            student_id: Booking student
            appointment_type_id: Requested appointment type
            start_time: UTC start
            end_time: UTC end, exclusive
            extras: Notes, party size and upstream-verified payment data

        Returns:
            BookingResult with the appointment on success, or the validation reason

        Raises:
            RepositoryException: If the store fails
        """
        extras = extras or BookingExtras()
        start_time, end_time = ensure_utc(start_time), ensure_utc(end_time)

        try:
            with self.transaction():
                self.appointment_repository.lock_instructor_timeline(instructor_id)

                validation = self.validator.validate(
                    instructor_id,
                    appointment_type_id,
                    start_time,
                    end_time,
                    party_size=extras.party_size,
                )
                if not validation.valid:
                    self.logger.info(
                        f"Booking rejected for instructor {instructor_id}: {validation.reason}",
                        extra={"code": validation.code.value if validation.code else None},
                    )
                    self._count(
                        prometheus_metrics.record_booking,
                        validation.code.value if validation.code else "rejected",
                    )
                    return BookingResult(
                        success=False, error=validation.reason, code=validation.code
                    )

                appointment = self.appointment_repository.create(
                    **self._build_appointment_fields(
                        instructor_id, student_id, appointment_type_id, start_time, end_time, extras
                    )
                )
        except BookingConflictException as exc:
            self.logger.warning(
                f"Concurrent booking conflict for instructor {instructor_id}: {exc.message}"
            )
            self._count(prometheus_metrics.record_booking, ValidationFailure.CONFLICT.value)
            return BookingResult(
                success=False, error=APPOINTMENT_CONFLICT_REASON, code=ValidationFailure.CONFLICT
            )

        self.log_operation(
            "book",
            appointment_id=appointment.id,
            instructor_id=instructor_id,
            status=appointment.status,
        )
        self._count(prometheus_metrics.record_booking, appointment.status)
        self._handle_post_booking_tasks(appointment)
        return BookingResult(success=True, appointment=appointment)

    def _build_appointment_fields(
        self,
        instructor_id: str,
        student_id: Optional[str],
        appointment_type_id: str,
        start_time: datetime,
        end_time: datetime,
        extras: BookingExtras,
    ) -> dict[str, Any]:
        appointment_type = self.appointment_type_repository.get_by_id(
            appointment_type_id, load_relationships=False
        )
        if appointment_type is None:
            raise NotFoundException("Appointment type not found")

        now = datetime.now(timezone.utc)
        requires_approval = bool(appointment_type.requires_approval)
        duration_minutes = extras.actual_duration_minutes or int(
            (end_time - start_time).total_seconds() // 60
        )
        total_price = (
            extras.total_price
            if extras.total_price is not None
            else calculate_price(appointment_type, duration_minutes)
        )
        paid = bool(extras.payment_intent_id or extras.stripe_payment_intent_id)

        return {
            "instructor_id": instructor_id,
            "student_id": student_id,
            "appointment_type_id": appointment_type_id,
            "start_time": start_time,
            "end_time": end_time,
            "status": (
                AppointmentStatus.PENDING.value
                if requires_approval
                else AppointmentStatus.CONFIRMED.value
            ),
            "confirmed_at": None if requires_approval else now,
            "party_size": extras.party_size,
            "student_notes": extras.student_notes,
            "actual_duration_minutes": duration_minutes,
            "total_price": total_price,
            "tax_amount": extras.tax_amount,
            "tax_rate": extras.tax_rate,
            "payment_status": PaymentStatus.PAID.value if paid else PaymentStatus.PENDING.value,
            "payment_intent_id": extras.payment_intent_id,
            "stripe_payment_intent_id": extras.stripe_payment_intent_id,
        }

    def _handle_post_booking_tasks(self, appointment: Appointment) -> None:
        """
        Mirror a committed appointment to the external calendar and publish its event.

        Args:
            appointment: The committed appointment
        """
        try:
            event_id = self.calendar_sync.mirror_appointment(appointment)
            if event_id:
                with self.transaction():
                    appointment.external_event_id = event_id
        except Exception as e:
            logger.error(f"Failed to mirror appointment {appointment.id} to calendar: {str(e)}")

        self._publish(
            AppointmentBooked(
                appointment_id=appointment.id,
                instructor_id=appointment.instructor_id,
                student_id=appointment.student_id,
                status=appointment.status,
                start_time=appointment.start_time,
                end_time=appointment.end_time,
                requires_approval=appointment.status == AppointmentStatus.PENDING.value,
            )
        )

    @staticmethod
    def _count(record: Callable[[str], None], label: str) -> None:
        if not settings.metrics_enabled:
            return
        try:
            record(label)
        except Exception as metrics_error:
            logger.debug(f"Metrics recording failed: {metrics_error}")

    def _publish(self, event: Any) -> None:
        try:
            self.event_publisher.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish {type(event).__name__}: {str(e)}")

    # Status transitions

    def _get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.appointment_repository.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundException(
                "Appointment not found", details={"appointment_id": appointment_id}
            )
        return appointment

    def _get_instructor_appointment(self, appointment_id: str, instructor_id: str) -> Appointment:
        appointment = self._get_appointment(appointment_id)
        if appointment.instructor_id != instructor_id:
            raise NotFoundException(
                "Appointment not found", details={"appointment_id": appointment_id}
            )
        return appointment

    @staticmethod
    def _ensure_transition(appointment: Appointment, target: AppointmentStatus) -> None:
        if not appointment.can_transition_to(target):
            raise InvalidStatusTransitionException(appointment.id, appointment.status, target.value)

    @staticmethod
    def _clean_reason(reason: Optional[str]) -> Optional[str]:
        if reason is None:
            return None
        reason = reason.strip()
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationException(
                f"Reason must be at most {MAX_REASON_LENGTH} characters",
                details={"length": len(reason)},
            )
        return reason or None

    @BaseService.measure_operation("approve")
    def approve(self, appointment_id: str, instructor_id: str) -> Appointment:
        """
        Confirm a pending appointment.

        Raises:
            NotFoundException: If the appointment is not this instructor's
            InvalidStatusTransitionException: If it is not pending
        """
        appointment = self._get_instructor_appointment(appointment_id, instructor_id)
        self._ensure_transition(appointment, AppointmentStatus.CONFIRMED)

        with self.transaction():
            appointment.confirm()

        self.log_operation("approve", appointment_id=appointment.id)
        self._count(prometheus_metrics.record_transition, "approve")
        self._publish(
            AppointmentApproved(
                appointment_id=appointment.id,
                instructor_id=appointment.instructor_id,
                student_id=appointment.student_id,
                confirmed_at=appointment.confirmed_at,
            )
        )
        return appointment

    @BaseService.measure_operation("reject")
    def reject(
        self, appointment_id: str, instructor_id: str, reason: Optional[str] = None
    ) -> Appointment:
        """
        Reject a pending appointment.

        Raises:
            NotFoundException: If the appointment is not this instructor's
            InvalidStatusTransitionException: If it is not pending
            ValidationException: If the reason is too long
        """
        appointment = self._get_instructor_appointment(appointment_id, instructor_id)
        self._ensure_transition(appointment, AppointmentStatus.REJECTED)
        reason = self._clean_reason(reason)

        with self.transaction():
            appointment.reject(reason)

        self.log_operation("reject", appointment_id=appointment.id)
        self._count(prometheus_metrics.record_transition, "reject")
        self.calendar_sync.remove_event(appointment)
        self._publish(
            AppointmentRejected(
                appointment_id=appointment.id,
                instructor_id=appointment.instructor_id,
                student_id=appointment.student_id,
                rejected_at=appointment.rejected_at,
                reason=reason,
            )
        )
        return appointment

    @BaseService.measure_operation("cancel")
    def cancel(
        self, appointment_id: str, actor_id: str, reason: Optional[str] = None
    ) -> Appointment:
        """
        Cancel a pending or confirmed appointment on behalf of its instructor or student.

        Raises:
            NotFoundException: If the appointment does not exist
            ValidationException: If the actor is not a party to it, or the reason is too long
            InvalidStatusTransitionException: If it is already terminal
        """
        appointment = self._get_appointment(appointment_id)
        if actor_id == appointment.instructor_id:
            cancelled_by = "instructor"
        elif actor_id == appointment.student_id:
            cancelled_by = "student"
        else:
            raise ValidationException(
                "Only the instructor or the student can cancel this appointment",
                details={"appointment_id": appointment_id},
            )
        self._ensure_transition(appointment, AppointmentStatus.CANCELLED)
        reason = self._clean_reason(reason)

        with self.transaction():
            appointment.cancel(actor_id, reason)

        self.log_operation("cancel", appointment_id=appointment.id, cancelled_by=cancelled_by)
        self._count(prometheus_metrics.record_transition, "cancel")
        self.calendar_sync.remove_event(appointment)
        self._publish(
            AppointmentCancelled(
                appointment_id=appointment.id,
                instructor_id=appointment.instructor_id,
                student_id=appointment.student_id,
                cancelled_by=cancelled_by,
                cancelled_at=appointment.cancelled_at,
                reason=reason,
            )
        )
        return appointment

    @BaseService.measure_operation("reschedule")
    def reschedule(
        self, appointment_id: str, new_start_time: datetime, new_end_time: datetime
    ) -> Appointment:
        """
        Move an active appointment to a new interval.

        The new interval is validated as a fresh booking that ignores the
        appointment being moved.

        Raises:
            NotFoundException: If the appointment does not exist
            InvalidStatusTransitionException: If the appointment is no longer active
            PolicyViolationException, BookingConflictException, OutOfWindowException:
                If the new interval fails validation
        """
        appointment = self._get_appointment(appointment_id)
        if not appointment.is_active:
            raise InvalidStatusTransitionException(
                appointment.id, appointment.status, appointment.status
            )

        new_start_time, new_end_time = ensure_utc(new_start_time), ensure_utc(new_end_time)
        previous_start, previous_end = appointment.start_time, appointment.end_time

        with self.transaction():
            self.appointment_repository.lock_instructor_timeline(appointment.instructor_id)
            validation = self.validator.validate(
                appointment.instructor_id,
                appointment.appointment_type_id,
                new_start_time,
                new_end_time,
                exclude_appointment_id=appointment.id,
                party_size=appointment.party_size,
            )
            if not validation.valid:
                raise validation_exception(validation)

            appointment.start_time = new_start_time
            appointment.end_time = new_end_time
            appointment.actual_duration_minutes = int(
                (new_end_time - new_start_time).total_seconds() // 60
            )
            self.appointment_repository.flush()

        self.log_operation("reschedule", appointment_id=appointment.id)
        self._count(prometheus_metrics.record_transition, "reschedule")
        self.calendar_sync.move_event(appointment)
        self._publish(
            AppointmentRescheduled(
                appointment_id=appointment.id,
                instructor_id=appointment.instructor_id,
                student_id=appointment.student_id,
                previous_start_time=previous_start,
                previous_end_time=previous_end,
                start_time=appointment.start_time,
                end_time=appointment.end_time,
            )
        )
        return appointment
