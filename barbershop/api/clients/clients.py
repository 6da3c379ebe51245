# Client register for the owner's barbershop
from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Client
from ...services.tenancy import current_tenant
from ...utils.payloads import CLIENT_FIELDS, PayloadError, apply_payload, missing_fields
from ...utils.security import login_required
from ...utils.serializers import client_to_dict

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.route("", methods=["GET"])
@login_required
def list_clients():
    """
    List clients
    ---
    tags:
      - Clients
    responses:
      200:
        description: Clients, most recently added first, with visit totals and loyalty points
    """
    try:
        shop = current_tenant()
        return jsonify([client_to_dict(c) for c in storage.list_clients(shop.id)])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list clients: {e}")
        return jsonify({"message": "Error fetching clients"}), 500


@clients_bp.route("", methods=["POST"])
@login_required
def create_client():
    """
    Register a client
    ---
    tags:
      - Clients
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
            birthDate:
              type: string
              example: "1990-04-21"
            notes:
              type: string
            preferences:
              type: string
    responses:
      201:
        description: Client created
      400:
        description: Missing name or invalid field
    """
    try:
        data = request.get_json(silent=True) or {}
        if missing_fields(data, ["name"]):
            return jsonify({"message": "name is required"}), 400

        shop = current_tenant()
        client = apply_payload(Client(barbershop_id=shop.id), data, CLIENT_FIELDS)
        db.session.add(client)
        db.session.commit()
        return jsonify(client_to_dict(client)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create client: {e}")
        return jsonify({"message": "Error creating client"}), 500


@clients_bp.route("/<client_id>", methods=["PATCH"])
@login_required
def update_client(client_id):
    """
    PATCH /api/clients/<client_id>
    Purpose: Update contact details and notes. Visit totals and loyalty points
    are maintained by appointment completion and are not writable here.
    """
    try:
        data = request.get_json(silent=True) or {}
        if "name" in data and not data["name"]:
            return jsonify({"message": "name cannot be empty"}), 400

        shop = current_tenant()
        client = storage.get_scoped(Client, shop.id, client_id)
        if not client:
            return jsonify({"message": "Client not found"}), 404

        apply_payload(client, data, CLIENT_FIELDS)
        db.session.commit()
        return jsonify(client_to_dict(client))

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update client {client_id}: {e}")
        return jsonify({"message": "Error updating client"}), 500
