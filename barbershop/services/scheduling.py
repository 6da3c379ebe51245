"""
Appointment booking and the status lifecycle.

    pending -> confirmed -> completed
    pending -> cancelled, confirmed -> cancelled
    pending -> completed (walk-ins settled on the spot)
    any status -> no_show

Nothing moves back to ``pending``. Completed and cancelled only move on to
no_show, which is final. Re-applying the current status is allowed and
re-stamps its timestamp.
"""

from datetime import datetime, time
from decimal import Decimal

from flask import current_app

from .. import storage
from ..extensions import db
from ..models import Appointment
from .loyalty import points_for

STATUSES = ("pending", "confirmed", "completed", "cancelled", "no_show")
INITIAL_STATUSES = ("pending", "confirmed")

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled", "completed", "no_show"},
    "confirmed": {"completed", "cancelled", "no_show"},
    "completed": {"no_show"},
    "cancelled": {"no_show"},
    "no_show": set(),
}

STATUS_TIMESTAMPS = {
    "confirmed": "confirmed_at",
    "completed": "completed_at",
    "cancelled": "cancelled_at",
}

MINUTES_PER_DAY = 24 * 60


class SchedulingError(ValueError):
    """Raised for bookings or status changes that cannot be honoured."""


def compute_end_time(start, duration_minutes):
    """
    End of a booking starting at ``start`` (a ``time`` or "HH:MM") that lasts
    ``duration_minutes``.

    Bookings are single-day: one that would run to or past midnight is
    rejected instead of wrapping around to the early hours.
    """
    if isinstance(start, str):
        start = time.fromisoformat(start)
    if duration_minutes is None or duration_minutes <= 0:
        raise SchedulingError("Service duration must be a positive number of minutes")

    total = start.hour * 60 + start.minute + duration_minutes
    if total >= MINUTES_PER_DAY:
        raise SchedulingError("Appointment would end after midnight")
    return time(total // 60, total % 60)


def check_transition(current, target):
    if target not in STATUSES:
        raise SchedulingError(f"Invalid status '{target}'")
    current = current or "pending"
    if target == current:
        return
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise SchedulingError(f"Cannot change status from '{current}' to '{target}'")


def book_appointment(
    tenant_id,
    service,
    barber,
    day,
    start_time,
    end_time=None,
    price=None,
    status="pending",
    **fields,
):
    """
    Add a new appointment to the session.

    End time defaults to start + the service duration and price to the
    service's current price; the price is snapshotted on the row. Overlapping
    bookings for the same barber are not rejected.
    """
    if status not in INITIAL_STATUSES:
        raise SchedulingError(f"Appointments cannot be created as '{status}'")
    if end_time is None:
        end_time = compute_end_time(start_time, service.duration)
    elif end_time <= start_time:
        raise SchedulingError("endTime must be after startTime")

    appointment = Appointment(
        barbershop_id=tenant_id,
        barber_id=barber.id,
        service_id=service.id,
        date=day,
        start_time=start_time,
        end_time=end_time,
        price=service.price if price is None else price,
        status=status,
        **fields,
    )
    if status == "confirmed":
        appointment.confirmed_at = datetime.now()
    db.session.add(appointment)
    return appointment


def record_visit(appointment, when):
    """Fold a completed appointment into its client's running totals."""
    client = appointment.client
    if client is None:
        return
    price = Decimal(appointment.price or 0)
    client.total_visits = (client.total_visits or 0) + 1
    client.total_spent = Decimal(client.total_spent or 0) + price
    client.last_visit = when

    plan = storage.get_active_loyalty_plan(appointment.barbershop_id)
    client.loyalty_points = (client.loyalty_points or 0) + points_for(price, plan)


def reverse_visit(appointment):
    """Take a completed appointment back out of its client's running totals."""
    client = appointment.client
    if client is None:
        return
    price = Decimal(appointment.price or 0)
    client.total_visits = max((client.total_visits or 0) - 1, 0)
    client.total_spent = max(Decimal(client.total_spent or 0) - price, Decimal("0"))

    plan = storage.get_active_loyalty_plan(appointment.barbershop_id)
    client.loyalty_points = max((client.loyalty_points or 0) - points_for(price, plan), 0)


def update_status(appointment, status, now=None):
    """Move ``appointment`` to ``status`` and stamp the matching timestamp."""
    check_transition(appointment.status, status)
    now = now or datetime.now()
    previous = appointment.status

    appointment.status = status
    stamp = STATUS_TIMESTAMPS.get(status)
    if stamp:
        setattr(appointment, stamp, now)

    if status == "completed" and previous != "completed":
        record_visit(appointment, now)
    elif previous == "completed" and status != "completed":
        reverse_visit(appointment)

    current_app.logger.info(
        f"Appointment {appointment.id} status {previous} -> {status}"
    )
    return appointment
