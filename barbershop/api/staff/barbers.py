# Barber roster for the owner's barbershop
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ... import storage
from ...extensions import db
from ...models import Barber
from ...services.tenancy import current_tenant
from ...utils.payloads import BARBER_FIELDS, PayloadError, apply_payload, missing_fields
from ...utils.security import login_required
from ...utils.serializers import barber_to_dict

barbers_bp = Blueprint("barbers", __name__, url_prefix="/api/barbers")


@barbers_bp.route("", methods=["GET"])
@login_required
def list_barbers():
    """
    List barbers
    ---
    tags:
      - Barbers
    parameters:
      - name: active
        in: query
        type: boolean
        required: false
        description: Only active barbers
    responses:
      200:
        description: Barbers ordered by name
    """
    try:
        shop = current_tenant()
        active_only = request.args.get("active", "").lower() == "true"
        barbers = storage.list_barbers(shop.id, active_only=active_only)
        return jsonify([barber_to_dict(b) for b in barbers])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list barbers: {e}")
        return jsonify({"message": "Error fetching barbers"}), 500


@barbers_bp.route("", methods=["POST"])
@login_required
def create_barber():
    """
    Add a barber
    ---
    tags:
      - Barbers
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name]
          properties:
            name:
              type: string
            phone:
              type: string
            email:
              type: string
            commissionRate:
              type: string
              example: "50.00"
            workStartTime:
              type: string
            workEndTime:
              type: string
            workDays:
              type: array
              items:
                type: string
    responses:
      201:
        description: Barber created
      400:
        description: Missing name or invalid field
    """
    try:
        data = request.get_json(silent=True) or {}
        if missing_fields(data, ["name"]):
            return jsonify({"message": "name is required"}), 400

        shop = current_tenant()
        barber = apply_payload(Barber(barbershop_id=shop.id), data, BARBER_FIELDS)
        db.session.add(barber)
        db.session.commit()
        return jsonify(barber_to_dict(barber)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create barber: {e}")
        return jsonify({"message": "Error creating barber"}), 500


@barbers_bp.route("/<barber_id>", methods=["PATCH"])
@login_required
def update_barber(barber_id):
    """
    PATCH /api/barbers/<barber_id>
    Purpose: Partial update of a barber; absent keys are left unchanged.
    """
    try:
        data = request.get_json(silent=True) or {}
        if "name" in data and not data["name"]:
            return jsonify({"message": "name cannot be empty"}), 400

        shop = current_tenant()
        barber = storage.get_scoped(Barber, shop.id, barber_id)
        if not barber:
            return jsonify({"message": "Barber not found"}), 404

        apply_payload(barber, data, BARBER_FIELDS)
        db.session.commit()
        return jsonify(barber_to_dict(barber))

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update barber {barber_id}: {e}")
        return jsonify({"message": "Error updating barber"}), 500


@barbers_bp.route("/<barber_id>", methods=["DELETE"])
@login_required
def delete_barber(barber_id):
    """
    Remove a barber
    ---
    tags:
      - Barbers
    responses:
      204:
        description: Deleted
      400:
        description: Barber still has appointments or ledger entries
      404:
        description: Barber not found
    """
    try:
        shop = current_tenant()
        barber = storage.get_scoped(Barber, shop.id, barber_id)
        if not barber:
            return jsonify({"message": "Barber not found"}), 404

        db.session.delete(barber)
        db.session.commit()
        return "", 204

    except IntegrityError:
        db.session.rollback()
        return jsonify({"message": "Barber has appointments; deactivate instead"}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to delete barber {barber_id}: {e}")
        return jsonify({"message": "Error deleting barber"}), 500
