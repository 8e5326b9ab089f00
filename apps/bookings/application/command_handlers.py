"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate seat reservation, free session accounting and payment
within transactions.

Commands:
- CreateBookingCommand: Book a seat (free, card or cash)
- CancelBookingCommand: Cancel a booking and release its seat
- ConfirmCashBookingCommand: Staff confirms a cash booking was paid
- ReclaimStaleBookingCommand: System cancels an unpaid pending booking

Every status change is a conditional UPDATE filtered on the statuses the
lifecycle allows as a source. Only the caller whose UPDATE matched the row
releases the seat, so a booking's seat is never released twice.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import Money
from apps.bookings.domain import lifecycle
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingPlaced
from apps.bookings.exceptions import (
    AlreadyBooked,
    AlreadyCancelled,
    BookingNotFound,
    Forbidden,
    InvalidTransition,
    PaymentFailed,
    SessionFull,
    SessionUnavailable,
)
from apps.bookings.guard import admit_booking_attempt
from apps.bookings.models import Booking
from apps.bookings.payments import PaymentError, PaymentGateway
from apps.classes import ledger
from apps.classes.services import get_session
from apps.members.services import MemberNotFound, claim_free_session, get_member, set_free_session_used

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to book a seat in a session

    Members who have not used their free session get it automatically,
    whatever payment method they picked.
    """
    member_id: int
    session_id: int
    payment_method: str
    payment_token: str | None = None
    origin: str | None = None
    now: datetime | None = None

    def __post_init__(self):
        if self.payment_method not in Booking.PaymentMethod.values:
            raise ValueError(f"Unknown payment method: {self.payment_method}")


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking (member cancels own, admin cancels any)"""
    booking_id: int
    acting_member_id: int
    reason: str = ''
    now: datetime | None = None


@dataclass
class ConfirmCashBookingCommand:
    """Command for staff to confirm a cash booking was paid at the session"""
    booking_id: int
    now: datetime | None = None


@dataclass
class ReclaimStaleBookingCommand:
    """Command to cancel a pending booking left unpaid past the deadline"""
    booking_id: int
    now: datetime | None = None


@dataclass
class CancellationResult:
    booking: Booking
    free_session_restored: bool = False
    free_session_forfeited: bool = False


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBookingCommand

    Business rules:
    1. The abuse guard must allow the attempt
    2. The session must be active and not yet started
    3. The member must not already hold a booking for the session
    4. A seat must be available (taken through the capacity ledger)
    5. Free session: claimed atomically with the seat, confirmed at price 0
    6. Cash: held as PENDING until staff confirm payment
    7. Card: seat held while the card is charged; a failed charge removes
       the booking and releases the seat
    """

    def __init__(self, payment_gateway: PaymentGateway):
        self.payment_gateway = payment_gateway

    def handle(self, command: CreateBookingCommand) -> Booking:
        now = command.now or timezone.now()
        logger.info(
            f"Booking session {command.session_id} for member {command.member_id} "
            f"({command.payment_method})"
        )

        try:
            member = get_member(command.member_id)
        except MemberNotFound as exc:
            raise BookingNotFound("Member not found.") from exc

        admit_booking_attempt(member.pk, command.origin, now)

        session = get_session(command.session_id)
        if not session.is_active:
            raise SessionUnavailable("This class has been withdrawn from the schedule.")
        if session.has_started(now):
            raise SessionUnavailable("This class has already started.")

        if self._has_active_booking(member.pk, session.pk):
            raise AlreadyBooked()

        if not member.has_used_free_session:
            booking = self._book_free(command, session, now)
            if booking is not None:
                return booking

        if command.payment_method == Booking.PaymentMethod.CARD and not command.payment_token:
            raise PaymentFailed("Card details are required to pay by card.")

        booking = self._hold_seat(command, session, now)
        if command.payment_method == Booking.PaymentMethod.CASH:
            return booking
        return self._charge(booking, command.payment_token, now)

    @staticmethod
    def _has_active_booking(member_id: int, session_id: int) -> bool:
        return Booking.objects.filter(
            member_id=member_id,
            session_id=session_id,
            status__in=lifecycle.ACTIVE_STATUSES,
        ).exists()

    def _raise_if_duplicate(self, command: CreateBookingCommand) -> None:
        """A concurrent request booked the same session for this member."""
        if self._has_active_booking(command.member_id, command.session_id):
            raise AlreadyBooked()

    def _book_free(self, command: CreateBookingCommand, session, now: datetime) -> Booking | None:
        """
        Claim the free session and a seat together. Returns None when a
        concurrent request claimed the free session first.
        """
        try:
            with DjangoUnitOfWork() as uow:
                if not claim_free_session(command.member_id):
                    logger.info(f"Free session for member {command.member_id} already claimed")
                    return None
                if not ledger.try_reserve(session.pk):
                    raise SessionFull()

                booking = Booking.objects.create(
                    member_id=command.member_id,
                    session=session,
                    status=Booking.Status.CONFIRMED,
                    payment_method=command.payment_method,
                    is_free_session=True,
                    price=Decimal('0.00'),
                    origin=command.origin or '',
                    created_at=now,
                    confirmed_at=now,
                )
                uow.add_event(self._placed(booking))
        except IntegrityError:
            self._raise_if_duplicate(command)
            raise

        logger.info(f"Free booking {booking.booking_code} confirmed for member {command.member_id}")
        return booking

    def _hold_seat(self, command: CreateBookingCommand, session, now: datetime) -> Booking:
        try:
            with DjangoUnitOfWork() as uow:
                if not ledger.try_reserve(session.pk):
                    raise SessionFull()

                booking = Booking.objects.create(
                    member_id=command.member_id,
                    session=session,
                    status=Booking.Status.PENDING,
                    payment_method=command.payment_method,
                    price=session.price,
                    origin=command.origin or '',
                    created_at=now,
                )
                if command.payment_method == Booking.PaymentMethod.CASH:
                    uow.add_event(self._placed(booking))
        except IntegrityError:
            self._raise_if_duplicate(command)
            raise

        logger.info(f"Seat held for booking {booking.booking_code} (pending {command.payment_method})")
        return booking

    def _charge(self, booking: Booking, payment_token: str, now: datetime) -> Booking:
        amount = Money(booking.price, settings.BOOKING_CURRENCY)
        try:
            reference = self.payment_gateway.charge(amount, payment_token, reference=booking.booking_code)
        except Exception as exc:
            self._abandon(booking)
            if isinstance(exc, PaymentError):
                logger.warning(f"Card payment for booking {booking.booking_code} failed: {exc}")
                raise PaymentFailed() from exc
            raise

        with DjangoUnitOfWork() as uow:
            confirmed = Booking.objects.filter(
                pk=booking.pk,
                status__in=lifecycle.sources_for(lifecycle.CONFIRMED),
            ).update(
                status=Booking.Status.CONFIRMED,
                payment_reference=reference,
                confirmed_at=now,
            )
            if confirmed:
                booking.refresh_from_db()
                uow.add_event(self._placed(booking))

        if not confirmed:
            # Cancelled while the charge was in flight; keep the reference for a refund
            Booking.objects.filter(pk=booking.pk).update(payment_reference=reference)
            logger.error(
                f"Booking {booking.booking_code} was cancelled during payment {reference}; refund required"
            )
            raise PaymentFailed("The booking was cancelled while the payment was processing.")

        logger.info(f"Card booking {booking.booking_code} confirmed with payment {reference}")
        return booking

    @staticmethod
    def _abandon(booking: Booking) -> None:
        """Remove a pending card booking whose charge did not go through."""
        with transaction.atomic():
            deleted, _ = Booking.objects.filter(pk=booking.pk, status=Booking.Status.PENDING).delete()
            if deleted:
                ledger.release(booking.session_id)
        logger.info(f"Abandoned unpaid booking {booking.booking_code}")

    @staticmethod
    def _placed(booking: Booking) -> BookingPlaced:
        return BookingPlaced(
            booking_id=booking.pk,
            member_id=booking.member_id,
            session_id=booking.session_id,
            status=booking.status,
            payment_method=booking.payment_method,
            is_free_session=booking.is_free_session,
            price=booking.price,
        )


def _cancel(
    booking: Booking,
    *,
    source: str,
    reason: str,
    now: datetime,
    extra_filter: dict | None = None,
) -> bool:
    """Conditionally move the booking to CANCELLED and release its seat."""
    updated = Booking.objects.filter(
        pk=booking.pk,
        status__in=lifecycle.sources_for(lifecycle.CANCELLED),
        **(extra_filter or {}),
    ).update(
        status=Booking.Status.CANCELLED,
        cancellation_source=source,
        cancellation_reason=reason,
        cancelled_at=now,
    )
    if updated:
        ledger.release(booking.session_id)
    return bool(updated)


class CancelBookingHandler:
    """
    Handler for CancelBookingCommand

    Business rules:
    1. Members cancel their own bookings; admins cancel any booking
    2. A cancelled booking cannot be cancelled again
    3. Members cannot cancel once the session has started; admins can
    4. The seat goes back to the session
    5. A free booking cancelled more than the grace period before the
       session starts gives the member their free session back; later
       cancellations forfeit it
    """

    def handle(self, command: CancelBookingCommand) -> CancellationResult:
        now = command.now or timezone.now()
        grace = timedelta(minutes=settings.BOOKING_FREE_SESSION_GRACE_MINUTES)

        booking = Booking.objects.select_related('session').filter(pk=command.booking_id).first()
        if booking is None:
            raise BookingNotFound()

        try:
            actor = get_member(command.acting_member_id)
        except MemberNotFound as exc:
            raise Forbidden() from exc

        if booking.member_id != actor.pk and not actor.is_admin:
            raise Forbidden()
        if not lifecycle.can_transition(booking.status, lifecycle.CANCELLED):
            raise AlreadyCancelled()
        if not actor.is_admin and booking.session.has_started(now):
            raise SessionUnavailable("This class has already started and can no longer be cancelled.")

        source = (
            Booking.CancellationSource.MEMBER
            if booking.member_id == actor.pk
            else Booking.CancellationSource.ADMIN
        )
        result = CancellationResult(booking=booking)

        with DjangoUnitOfWork() as uow:
            if not _cancel(booking, source=source, reason=command.reason, now=now):
                raise AlreadyCancelled()

            if booking.is_free_session and booking.member_id is not None:
                if lifecycle.restores_free_session(booking.session.starts_at, now, grace):
                    set_free_session_used(booking.member_id, False)
                    result.free_session_restored = True
                else:
                    result.free_session_forfeited = True

            uow.add_event(BookingCancelled(
                booking_id=booking.pk,
                member_id=booking.member_id,
                session_id=booking.session_id,
                source=source,
                reason=command.reason,
                free_session_restored=result.free_session_restored,
                free_session_forfeited=result.free_session_forfeited,
            ))

        booking.refresh_from_db()
        logger.info(
            f"Booking {booking.booking_code} cancelled by {source} {actor.pk} "
            f"(free restored={result.free_session_restored}, forfeited={result.free_session_forfeited})"
        )
        return result


class ConfirmCashBookingHandler:
    """
    Handler for ConfirmCashBookingCommand

    Only PENDING cash bookings can be confirmed; a pending card booking is
    confirmed by its own charge.
    """

    def handle(self, command: ConfirmCashBookingCommand) -> Booking:
        now = command.now or timezone.now()

        booking = Booking.objects.filter(pk=command.booking_id).first()
        if booking is None:
            raise BookingNotFound()
        if booking.payment_method != Booking.PaymentMethod.CASH:
            raise InvalidTransition("Only cash bookings can be confirmed by staff.")

        with DjangoUnitOfWork() as uow:
            updated = Booking.objects.filter(
                pk=booking.pk,
                payment_method=Booking.PaymentMethod.CASH,
                status__in=lifecycle.sources_for(lifecycle.CONFIRMED),
            ).update(status=Booking.Status.CONFIRMED, confirmed_at=now)

            if updated:
                uow.add_event(BookingConfirmed(
                    booking_id=booking.pk,
                    member_id=booking.member_id,
                    session_id=booking.session_id,
                ))

        booking.refresh_from_db()
        if not updated:
            if booking.status == Booking.Status.CANCELLED:
                raise AlreadyCancelled()
            raise InvalidTransition("This booking is already confirmed.")

        logger.info(f"Cash booking {booking.booking_code} confirmed")
        return booking


class ReclaimStaleBookingHandler:
    """
    Handler for ReclaimStaleBookingCommand

    Cancels the booking only if it is still PENDING and older than the
    stale deadline at the moment of the update. Returns True when this
    call performed the cancellation.
    """

    reason = "Payment was not received within 24 hours."

    def handle(self, command: ReclaimStaleBookingCommand) -> bool:
        now = command.now or timezone.now()

        booking = Booking.objects.filter(pk=command.booking_id).first()
        if booking is None:
            return False

        with DjangoUnitOfWork() as uow:
            reclaimed = _cancel(
                booking,
                source=Booking.CancellationSource.SYSTEM,
                reason=self.reason,
                now=now,
                extra_filter={
                    'status': Booking.Status.PENDING,
                    'created_at__lt': now - lifecycle.STALE_PENDING_AFTER,
                },
            )
            if reclaimed:
                uow.add_event(BookingCancelled(
                    booking_id=booking.pk,
                    member_id=booking.member_id,
                    session_id=booking.session_id,
                    source=Booking.CancellationSource.SYSTEM,
                    reason=self.reason,
                ))

        if reclaimed:
            logger.info(f"Reclaimed stale pending booking {booking.booking_code}")
        return reclaimed
