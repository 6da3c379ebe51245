import calendar
from datetime import date, datetime, timedelta

from sqlalchemy import exists, func, select

from .. import storage
from ..extensions import db
from ..models import Appointment, Transaction

# Booked-vs-available slot ratio is not computed yet; the dashboard shows this
# fixed figure.
OCCUPANCY_RATE_PLACEHOLDER = 75

NEW_CLIENT_WINDOW_DAYS = 30


def month_bounds(day):
    """First and last date of the calendar month containing ``day``."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def compute_dashboard_stats(tenant_id, today=None, now=None):
    """
    Headline numbers for the owner dashboard.

    Revenue excludes expenses and refunds. New clients are those created in
    the trailing 30 days counted from ``now``.
    """
    now = now or datetime.now()
    today = today or now.date()
    month_start, month_end = month_bounds(today)

    todays = storage.list_appointments(tenant_id, today)

    return {
        "todayAppointments": len(todays),
        "todayRevenue": storage.sum_transactions(tenant_id, today, today),
        "monthlyRevenue": storage.sum_transactions(tenant_id, month_start, month_end),
        "newClients": storage.count_clients_since(
            tenant_id, now - timedelta(days=NEW_CLIENT_WINDOW_DAYS)
        ),
        "occupancyRate": OCCUPANCY_RATE_PLACEHOLDER,
        "pendingAppointments": sum(1 for a in todays if a.status == "pending"),
    }


def unpaid_completed_total(tenant_id, start, end):
    """Value of completed appointments in [start, end] with no ledger entry."""
    settled = exists().where(Transaction.appointment_id == Appointment.id)
    total = db.session.scalar(
        select(func.coalesce(func.sum(Appointment.price), 0))
        .where(Appointment.barbershop_id == tenant_id)
        .where(Appointment.status == "completed")
        .where(Appointment.date >= start)
        .where(Appointment.date <= end)
        .where(~settled)
    )
    return float(total or 0)


def compute_finance_stats(tenant_id, today=None):
    today = today or date.today()
    month_start, month_end = month_bounds(today)

    monthly_revenue = storage.sum_transactions(tenant_id, month_start, month_end)
    monthly_expenses = storage.sum_transactions(
        tenant_id, month_start, month_end, revenue=False
    )

    return {
        "todayRevenue": storage.sum_transactions(tenant_id, today, today),
        "monthlyRevenue": monthly_revenue,
        "monthlyExpenses": monthly_expenses,
        "netProfit": round(monthly_revenue - monthly_expenses, 2),
        "pendingPayments": unpaid_completed_total(tenant_id, month_start, month_end),
    }
