# List, book and move appointments through their status lifecycle
from datetime import date

from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Appointment, Barber, Client, Service
from ...services.scheduling import book_appointment, update_status
from ...services.tenancy import current_tenant
from ...utils.payloads import (
    PayloadError,
    missing_fields,
    parse_date,
    parse_decimal,
    parse_field,
    parse_time,
)
from ...utils.security import login_required
from ...utils.serializers import appointment_to_dict

appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointments_bp.route("", methods=["GET"])
@login_required
def list_appointments():
    """
    List the barbershop's appointments
    ---
    tags:
      - Appointments
    parameters:
      - name: date
        in: query
        type: string
        required: false
        description: Only this day (YYYY-MM-DD), ordered by start time
    responses:
      200:
        description: Appointments. Without a date, newest day first.
      400:
        description: Malformed date
    """
    try:
        day = parse_field(request.args, "date", parse_date)
        shop = current_tenant()
        appointments = storage.list_appointments(shop.id, day)
        return jsonify([appointment_to_dict(a) for a in appointments])
    except PayloadError as e:
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list appointments: {e}")
        return jsonify({"message": "Error fetching appointments"}), 500


@appointments_bp.route("/today", methods=["GET"])
@login_required
def list_today_appointments():
    """
    GET /api/appointments/today
    Purpose: Today's appointments for the barbershop, ordered by start time.
    """
    try:
        shop = current_tenant()
        appointments = storage.list_appointments(shop.id, date.today())
        return jsonify([appointment_to_dict(a) for a in appointments])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list today's appointments: {e}")
        return jsonify({"message": "Error fetching appointments"}), 500


@appointments_bp.route("", methods=["POST"])
@login_required
def create_appointment():
    """
    Book an appointment from the dashboard
    ---
    tags:
      - Appointments
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [barberId, serviceId, date, startTime]
          properties:
            barberId:
              type: string
            serviceId:
              type: string
            clientId:
              type: string
            date:
              type: string
              example: "2024-06-10"
            startTime:
              type: string
              example: "09:00"
            endTime:
              type: string
              description: Defaults to startTime + service duration
            price:
              type: string
              description: Defaults to the service's current price
            status:
              type: string
              enum: [pending, confirmed]
            clientName:
              type: string
            clientPhone:
              type: string
            notes:
              type: string
    responses:
      201:
        description: Appointment created
      400:
        description: Missing or invalid fields
      404:
        description: Barber, service or client not found in this barbershop
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["barberId", "serviceId", "date", "startTime"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        day = parse_field(data, "date", parse_date)
        start_time = parse_field(data, "startTime", parse_time)
        end_time = parse_field(data, "endTime", parse_time)
        price = parse_field(data, "price", parse_decimal)

        shop = current_tenant()
        service = storage.get_scoped(Service, shop.id, data["serviceId"])
        if not service:
            return jsonify({"message": "Service not found"}), 404
        barber = storage.get_scoped(Barber, shop.id, data["barberId"])
        if not barber:
            return jsonify({"message": "Barber not found"}), 404

        client = None
        if data.get("clientId"):
            client = storage.get_scoped(Client, shop.id, data["clientId"])
            if not client:
                return jsonify({"message": "Client not found"}), 404

        appointment = book_appointment(
            shop.id,
            service,
            barber,
            day,
            start_time,
            end_time=end_time,
            price=price,
            status=data.get("status") or "pending",
            client_id=client.id if client else None,
            client_name=data.get("clientName") or (client.name if client else None),
            client_phone=data.get("clientPhone") or (client.phone if client else None),
            notes=data.get("notes"),
        )
        db.session.commit()
        return jsonify(appointment_to_dict(appointment)), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create appointment: {e}")
        return jsonify({"message": "Error creating appointment"}), 500


@appointments_bp.route("/<appointment_id>/status", methods=["PATCH"])
@login_required
def update_appointment_status(appointment_id):
    """
    Move an appointment to a new status
    ---
    tags:
      - Appointments
    parameters:
      - name: appointment_id
        in: path
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            status:
              type: string
              enum: [pending, confirmed, completed, cancelled, no_show]
    responses:
      200:
        description: Updated appointment with its status timestamp stamped
      400:
        description: Unknown status or transition not allowed
      404:
        description: Appointment not found
    """
    try:
        data = request.get_json(silent=True) or {}
        status = data.get("status")
        if not status:
            return jsonify({"message": "status is required"}), 400

        shop = current_tenant()
        appointment = storage.get_scoped(Appointment, shop.id, appointment_id)
        if not appointment:
            return jsonify({"message": "Appointment not found"}), 404

        update_status(appointment, status)
        db.session.commit()
        return jsonify(appointment_to_dict(appointment))

    except ValueError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update appointment {appointment_id}: {e}")
        return jsonify({"message": "Error updating appointment"}), 500
