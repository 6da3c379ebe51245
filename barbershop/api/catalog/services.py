# Service menu and its categories
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from ... import storage
from ...extensions import db
from ...models import Service, ServiceCategory
from ...services.tenancy import current_tenant
from ...utils.payloads import (
    CATEGORY_FIELDS,
    SERVICE_FIELDS,
    PayloadError,
    apply_payload,
    missing_fields,
)
from ...utils.security import login_required
from ...utils.serializers import category_to_dict, service_to_dict

services_bp = Blueprint("services", __name__, url_prefix="/api/services")
categories_bp = Blueprint(
    "service_categories", __name__, url_prefix="/api/service-categories"
)


def check_service(shop, service):
    """Reject durations that cannot be booked and categories of other shops."""
    if service.duration is None or service.duration <= 0:
        raise PayloadError("duration must be a positive number of minutes")
    if service.price is None or service.price < 0:
        raise PayloadError("price cannot be negative")
    if service.category_id and not storage.get_scoped(
        ServiceCategory, shop.id, service.category_id
    ):
        raise PayloadError("Unknown categoryId")


@services_bp.route("", methods=["GET"])
@login_required
def list_services():
    """
    List services
    ---
    tags:
      - Services
    parameters:
      - name: active
        in: query
        type: boolean
        required: false
    responses:
      200:
        description: Services ordered by name
    """
    try:
        shop = current_tenant()
        active_only = request.args.get("active", "").lower() == "true"
        services = storage.list_services(shop.id, active_only=active_only)
        return jsonify([service_to_dict(s) for s in services])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list services: {e}")
        return jsonify({"message": "Error fetching services"}), 500


@services_bp.route("", methods=["POST"])
@login_required
def create_service():
    """
    Add a service
    ---
    tags:
      - Services
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, price, duration]
          properties:
            name:
              type: string
              example: Corte
            price:
              type: string
              example: "55.00"
            duration:
              type: integer
              example: 30
            categoryId:
              type: string
            isCombo:
              type: boolean
    responses:
      201:
        description: Service created
      400:
        description: Missing or invalid fields
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["name", "price", "duration"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        shop = current_tenant()
        service = apply_payload(Service(barbershop_id=shop.id), data, SERVICE_FIELDS)
        check_service(shop, service)
        db.session.add(service)
        db.session.commit()
        return jsonify(service_to_dict(service)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create service: {e}")
        return jsonify({"message": "Error creating service"}), 500


@services_bp.route("/<service_id>", methods=["PATCH"])
@login_required
def update_service(service_id):
    """
    PATCH /api/services/<service_id>
    Purpose: Partial update. Price changes do not touch existing appointments,
    which keep the price they were booked at.
    """
    try:
        data = request.get_json(silent=True) or {}
        if "name" in data and not data["name"]:
            return jsonify({"message": "name cannot be empty"}), 400

        shop = current_tenant()
        service = storage.get_scoped(Service, shop.id, service_id)
        if not service:
            return jsonify({"message": "Service not found"}), 404

        apply_payload(service, data, SERVICE_FIELDS)
        check_service(shop, service)
        db.session.commit()
        return jsonify(service_to_dict(service))

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update service {service_id}: {e}")
        return jsonify({"message": "Error updating service"}), 500


@services_bp.route("/<service_id>", methods=["DELETE"])
@login_required
def delete_service(service_id):
    try:
        shop = current_tenant()
        service = storage.get_scoped(Service, shop.id, service_id)
        if not service:
            return jsonify({"message": "Service not found"}), 404

        db.session.delete(service)
        db.session.commit()
        return "", 204

    except IntegrityError:
        db.session.rollback()
        return jsonify({"message": "Service has appointments; deactivate instead"}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to delete service {service_id}: {e}")
        return jsonify({"message": "Error deleting service"}), 500


@categories_bp.route("", methods=["GET"])
@login_required
def list_categories():
    """
    GET /api/service-categories
    Purpose: Categories in display order.
    """
    try:
        shop = current_tenant()
        return jsonify([category_to_dict(c) for c in storage.list_categories(shop.id)])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list service categories: {e}")
        return jsonify({"message": "Error fetching categories"}), 500


@categories_bp.route("", methods=["POST"])
@login_required
def create_category():
    """
    Add a service category
    ---
    tags:
      - Services
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
            description:
              type: string
            sortOrder:
              type: integer
    responses:
      201:
        description: Category created
    """
    try:
        data = request.get_json(silent=True) or {}
        if missing_fields(data, ["name"]):
            return jsonify({"message": "name is required"}), 400

        shop = current_tenant()
        category = apply_payload(
            ServiceCategory(barbershop_id=shop.id), data, CATEGORY_FIELDS
        )
        db.session.add(category)
        db.session.commit()
        return jsonify(category_to_dict(category)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create service category: {e}")
        return jsonify({"message": "Error creating category"}), 500
