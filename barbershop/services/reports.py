from collections import Counter
from datetime import date, datetime, timedelta
from io import BytesIO

import pandas as pd
from sqlalchemy import func, select

from .. import storage
from ..extensions import db
from ..models import Appointment, Barber, Service
from ..utils.serializers import (
    appointment_to_dict,
    client_to_dict,
    transaction_to_dict,
)
from .stats import NEW_CLIENT_WINDOW_DAYS

REPORT_WINDOW_DAYS = 30
TOP_LIMIT = 5


def _top_by_completed(tenant_id, model, join_column, count_key):
    """Rank services or barbers by completed appointments and their revenue."""
    appointments = func.count(Appointment.id)
    rows = db.session.execute(
        select(model.name, appointments, func.coalesce(func.sum(Appointment.price), 0))
        .join(model, model.id == join_column)
        .where(Appointment.barbershop_id == tenant_id)
        .where(Appointment.status == "completed")
        .group_by(model.id, model.name)
        .order_by(appointments.desc(), model.name)
        .limit(TOP_LIMIT)
    ).all()
    return [
        {"name": name, count_key: count, "revenue": float(revenue or 0)}
        for name, count, revenue in rows
    ]


def peak_hours(appointments):
    counts = Counter(
        a.start_time.hour
        for a in appointments
        if a.start_time and a.status not in ("cancelled", "no_show")
    )
    return [{"hour": f"{hour:02d}:00", "count": counts[hour]} for hour in sorted(counts)]


def compute_report(tenant_id, today=None, now=None):
    now = now or datetime.now()
    today = today or now.date()
    window_start = today - timedelta(days=REPORT_WINDOW_DAYS - 1)

    total_revenue = storage.sum_transactions(tenant_id)
    total_appointments = storage.count_appointments(tenant_id)
    completed = db.session.scalar(
        select(func.count(Appointment.id))
        .where(Appointment.barbershop_id == tenant_id)
        .where(Appointment.status == "completed")
    ) or 0

    revenue_by_day = storage.daily_revenue(tenant_id, window_start, today)
    daily = []
    for offset in range(REPORT_WINDOW_DAYS):
        day = window_start + timedelta(days=offset)
        daily.append({"date": day.isoformat(), "revenue": revenue_by_day.get(day, 0.0)})

    recent = storage.list_appointments_between(tenant_id, window_start, today)

    return {
        "totalRevenue": total_revenue,
        "totalAppointments": total_appointments,
        "completedAppointments": completed,
        "totalClients": storage.count_clients(tenant_id),
        "newClients": storage.count_clients_since(
            tenant_id, now - timedelta(days=NEW_CLIENT_WINDOW_DAYS)
        ),
        "averageTicket": (
            round(total_revenue / total_appointments, 2) if total_appointments else 0
        ),
        "topServices": _top_by_completed(tenant_id, Service, Appointment.service_id, "count"),
        "topBarbers": _top_by_completed(tenant_id, Barber, Appointment.barber_id, "appointments"),
        "peakHours": peak_hours(recent),
        "dailyRevenue": daily,
    }


def build_report_workbook(tenant_id, sections=None):
    """Excel workbook with one sheet per selected section."""
    sections = sections or {"transactions": True, "appointments": True, "clients": True}
    output = BytesIO()

    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        if sections.get("transactions"):
            rows = [transaction_to_dict(t) for t in storage.list_transactions(tenant_id)]
            pd.DataFrame(
                rows,
                columns=["date", "type", "category", "description", "amount", "paymentMethod"],
            ).to_excel(writer, sheet_name="Transactions", index=False)

        if sections.get("appointments"):
            rows = [appointment_to_dict(a) for a in storage.list_appointments(tenant_id)]
            pd.DataFrame(
                rows,
                columns=["date", "startTime", "endTime", "status", "price", "clientName"],
            ).to_excel(writer, sheet_name="Appointments", index=False)

        if sections.get("clients"):
            rows = [client_to_dict(c) for c in storage.list_clients(tenant_id)]
            pd.DataFrame(
                rows,
                columns=["name", "phone", "email", "totalVisits", "totalSpent", "loyaltyPoints"],
            ).to_excel(writer, sheet_name="Clients", index=False)

        # xlsxwriter refuses to save a workbook without sheets
        if not writer.sheets:
            pd.DataFrame().to_excel(writer, sheet_name="Report", index=False)

    output.seek(0)
    return output


def report_filename(today=None):
    today = today or date.today()
    return f"barbershop_report_{today.strftime('%Y%m%d')}.xlsx"
