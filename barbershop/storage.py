"""
Tenant-scoped data access.

Every helper here that touches a tenant-owned table takes the tenant
(barbershop) id and filters on it, so a row belonging to another barbershop is
indistinguishable from a missing one.
"""

from sqlalchemy import func, select

from .extensions import db
from .models import (
    Appointment,
    Barber,
    Barbershop,
    Client,
    Coupon,
    LoyaltyPlan,
    Review,
    Service,
    ServiceCategory,
    Transaction,
)

TRANSACTION_TYPES = ("service", "product", "expense", "refund")
NON_REVENUE_TYPES = ("expense", "refund")
PAYMENT_METHODS = ("cash", "pix", "credit", "debit")


def get_scoped(model, tenant_id, obj_id):
    """Fetch one tenant-owned row by id, or None."""
    return db.session.scalars(
        select(model)
        .where(model.id == obj_id)
        .where(model.barbershop_id == tenant_id)
    ).first()


def list_scoped(model, tenant_id, *order_by):
    stmt = select(model).where(model.barbershop_id == tenant_id)
    if order_by:
        stmt = stmt.order_by(*order_by)
    return db.session.scalars(stmt).all()


# Barbershops


def get_barbershop_by_owner(owner_id):
    return db.session.scalars(
        select(Barbershop).where(Barbershop.owner_id == owner_id)
    ).first()


def get_barbershop_by_slug(slug):
    return db.session.scalars(select(Barbershop).where(Barbershop.slug == slug)).first()


# Catalog and staff


def list_barbers(tenant_id, active_only=False):
    stmt = select(Barber).where(Barber.barbershop_id == tenant_id)
    if active_only:
        stmt = stmt.where(Barber.is_active.is_(True))
    return db.session.scalars(stmt.order_by(Barber.name)).all()


def list_services(tenant_id, active_only=False):
    stmt = select(Service).where(Service.barbershop_id == tenant_id)
    if active_only:
        stmt = stmt.where(Service.is_active.is_(True))
    return db.session.scalars(stmt.order_by(Service.name)).all()


def list_categories(tenant_id):
    return list_scoped(
        ServiceCategory, tenant_id, ServiceCategory.sort_order, ServiceCategory.name
    )


# Clients


def list_clients(tenant_id):
    return list_scoped(Client, tenant_id, Client.created_at.desc())


def find_client_by_phone(tenant_id, phone):
    if not phone:
        return None
    return db.session.scalars(
        select(Client)
        .where(Client.barbershop_id == tenant_id)
        .where(Client.phone == phone)
    ).first()


def count_clients_since(tenant_id, since):
    return db.session.scalar(
        select(func.count(Client.id))
        .where(Client.barbershop_id == tenant_id)
        .where(Client.created_at >= since)
    ) or 0


def count_clients(tenant_id):
    return db.session.scalar(
        select(func.count(Client.id)).where(Client.barbershop_id == tenant_id)
    ) or 0


# Appointments


def list_appointments(tenant_id, day=None):
    """
    Appointments for a tenant.

    With ``day`` only that date is returned, ordered by start time; otherwise
    the full history, newest date first and by start time within a day.
    """
    stmt = select(Appointment).where(Appointment.barbershop_id == tenant_id)
    if day is not None:
        stmt = stmt.where(Appointment.date == day).order_by(Appointment.start_time)
    else:
        stmt = stmt.order_by(Appointment.date.desc(), Appointment.start_time)
    return db.session.scalars(stmt).all()


def list_appointments_between(tenant_id, start, end):
    return db.session.scalars(
        select(Appointment)
        .where(Appointment.barbershop_id == tenant_id)
        .where(Appointment.date >= start)
        .where(Appointment.date <= end)
        .order_by(Appointment.date, Appointment.start_time)
    ).all()


def count_appointments(tenant_id):
    return db.session.scalar(
        select(func.count(Appointment.id)).where(
            Appointment.barbershop_id == tenant_id
        )
    ) or 0


# Ledger


def list_transactions(tenant_id, limit=None):
    stmt = (
        select(Transaction)
        .where(Transaction.barbershop_id == tenant_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
    )
    if limit:
        stmt = stmt.limit(limit)
    return db.session.scalars(stmt).all()


def sum_transactions(tenant_id, start=None, end=None, revenue=True):
    """
    Sum ledger amounts for a tenant between two dates (inclusive).

    ``revenue=True`` adds up everything except expenses and refunds;
    ``revenue=False`` adds up only expenses and refunds.
    """
    stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        Transaction.barbershop_id == tenant_id
    )
    if revenue:
        stmt = stmt.where(Transaction.type.not_in(NON_REVENUE_TYPES))
    else:
        stmt = stmt.where(Transaction.type.in_(NON_REVENUE_TYPES))
    if start is not None:
        stmt = stmt.where(Transaction.date >= start)
    if end is not None:
        stmt = stmt.where(Transaction.date <= end)
    return float(db.session.scalar(stmt) or 0)


def daily_revenue(tenant_id, start, end):
    """{date: revenue} for days in [start, end] that have revenue entries."""
    rows = db.session.execute(
        select(Transaction.date, func.sum(Transaction.amount))
        .where(Transaction.barbershop_id == tenant_id)
        .where(Transaction.type.not_in(NON_REVENUE_TYPES))
        .where(Transaction.date >= start)
        .where(Transaction.date <= end)
        .group_by(Transaction.date)
    ).all()
    return {day: float(total or 0) for day, total in rows}


# Loyalty and promotions


def get_active_loyalty_plan(tenant_id):
    return db.session.scalars(
        select(LoyaltyPlan)
        .where(LoyaltyPlan.barbershop_id == tenant_id)
        .where(LoyaltyPlan.is_active.is_(True))
        .order_by(LoyaltyPlan.created_at)
    ).first()


def get_coupon_by_code(tenant_id, code):
    return db.session.scalars(
        select(Coupon)
        .where(Coupon.barbershop_id == tenant_id)
        .where(func.upper(Coupon.code) == code.upper())
    ).first()


# Reviews


def list_reviews(tenant_id, public_only=False):
    stmt = select(Review).where(Review.barbershop_id == tenant_id)
    if public_only:
        stmt = stmt.where(Review.is_public.is_(True))
    return db.session.scalars(stmt.order_by(Review.created_at.desc())).all()


def review_rating_counts(tenant_id):
    """{rating: number of reviews} for a tenant."""
    rows = db.session.execute(
        select(Review.rating, func.count(Review.id))
        .where(Review.barbershop_id == tenant_id)
        .group_by(Review.rating)
    ).all()
    return {rating: count for rating, count in rows}
