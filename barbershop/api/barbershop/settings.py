# Tenant (barbershop) settings for the authenticated owner
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ...extensions import db
from ...services.tenancy import current_tenant
from ...utils.payloads import BARBERSHOP_FIELDS, PayloadError, apply_payload
from ...utils.security import login_required
from ...utils.serializers import barbershop_to_dict

barbershop_bp = Blueprint("barbershop", __name__, url_prefix="/api/barbershop")


@barbershop_bp.route("", methods=["GET"])
@login_required
def get_barbershop():
    """
    Get (or provision) the current owner's barbershop
    ---
    tags:
      - Barbershop
    responses:
      200:
        description: The owner's barbershop. Created on first access.
      401:
        description: Missing or invalid token
      500:
        description: Storage error
    """
    try:
        return jsonify(barbershop_to_dict(current_tenant()))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to resolve barbershop: {e}")
        return jsonify({"message": "Error fetching barbershop"}), 500


@barbershop_bp.route("", methods=["PATCH"])
@login_required
def update_barbershop():
    """
    Update the current owner's barbershop settings
    ---
    tags:
      - Barbershop
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name:
              type: string
            slug:
              type: string
            openingTime:
              type: string
              example: "09:00"
            closingTime:
              type: string
              example: "19:00"
            workDays:
              type: array
              items:
                type: string
    responses:
      200:
        description: Updated barbershop
      400:
        description: Invalid field value or slug already taken
    """
    try:
        shop = current_tenant()
        data = request.get_json(silent=True) or {}

        if "name" in data and not data["name"]:
            return jsonify({"message": "name cannot be empty"}), 400
        if "slug" in data and not data["slug"]:
            return jsonify({"message": "slug cannot be empty"}), 400

        apply_payload(shop, data, BARBERSHOP_FIELDS)
        db.session.commit()
        return jsonify(barbershop_to_dict(shop))

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except IntegrityError:
        db.session.rollback()
        return jsonify({"message": "Slug already in use"}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update barbershop: {e}")
        return jsonify({"message": "Error updating barbershop"}), 500
