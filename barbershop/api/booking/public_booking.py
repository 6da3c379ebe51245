# Unauthenticated booking intake behind a barbershop's public link
from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Barber, Service
from ...services.scheduling import book_appointment
from ...utils.payloads import missing_fields, parse_date, parse_field, parse_time
from ...utils.serializers import appointment_to_dict

public_booking_bp = Blueprint(
    "public_booking", __name__, url_prefix="/api/public/appointments"
)

REQUIRED_FIELDS = [
    "slug",
    "serviceId",
    "barberId",
    "date",
    "startTime",
    "clientName",
    "clientPhone",
]


@public_booking_bp.route("", methods=["POST"])
def create_public_appointment():
    """
    Book an appointment from the public booking page
    ---
    tags:
      - Public
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [slug, serviceId, barberId, date, startTime, clientName, clientPhone]
          properties:
            slug:
              type: string
              example: teixeira
            serviceId:
              type: string
            barberId:
              type: string
            date:
              type: string
              example: "2024-06-10"
            startTime:
              type: string
              example: "09:00"
            clientName:
              type: string
            clientPhone:
              type: string
            notes:
              type: string
    responses:
      201:
        description: Pending appointment with end time and price taken from the service
      400:
        description: Missing fields, malformed date/time or a booking past midnight
      404:
        description: Barbershop, service or barber not found
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, REQUIRED_FIELDS)
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        day = parse_field(data, "date", parse_date)
        start_time = parse_field(data, "startTime", parse_time)

        shop = storage.get_barbershop_by_slug(data["slug"])
        if not shop:
            return jsonify({"message": "Barbershop not found"}), 404

        service = storage.get_scoped(Service, shop.id, data["serviceId"])
        if not service:
            return jsonify({"message": "Service not found"}), 404
        barber = storage.get_scoped(Barber, shop.id, data["barberId"])
        if not barber:
            return jsonify({"message": "Barber not found"}), 404

        client = storage.find_client_by_phone(shop.id, data["clientPhone"])

        appointment = book_appointment(
            shop.id,
            service,
            barber,
            day,
            start_time,
            client_id=client.id if client else None,
            client_name=data["clientName"],
            client_phone=data["clientPhone"],
            notes=data.get("notes"),
        )
        db.session.commit()
        current_app.logger.info(
            f"Public booking {appointment.id} for {shop.slug} on {day} {start_time}"
        )
        return jsonify(appointment_to_dict(appointment)), 201

    except ValueError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Public booking failed: {e}")
        return jsonify({"message": "Error creating appointment"}), 500
