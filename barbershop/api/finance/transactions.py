# Financial ledger and the finance summary built on it
from datetime import date

from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Appointment, Barber, Client, Transaction
from ...services.stats import compute_finance_stats
from ...services.tenancy import current_tenant
from ...utils.payloads import (
    TRANSACTION_FIELDS,
    PayloadError,
    apply_payload,
    missing_fields,
)
from ...utils.security import login_required
from ...utils.serializers import transaction_to_dict

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")
finances_bp = Blueprint("finances", __name__, url_prefix="/api/finances")

RECENT_LIMIT = 10

# JSON key -> model a referenced id must belong to (same barbershop)
REFERENCES = {
    "appointmentId": Appointment,
    "barberId": Barber,
    "clientId": Client,
}


def check_transaction(shop, tx, data):
    if tx.type not in storage.TRANSACTION_TYPES:
        raise PayloadError(
            f"type must be one of: {', '.join(storage.TRANSACTION_TYPES)}"
        )
    if tx.amount is None or tx.amount <= 0:
        raise PayloadError("amount must be greater than zero")
    if tx.payment_method and tx.payment_method not in storage.PAYMENT_METHODS:
        raise PayloadError(
            f"paymentMethod must be one of: {', '.join(storage.PAYMENT_METHODS)}"
        )
    for key, model in REFERENCES.items():
        if data.get(key) and not storage.get_scoped(model, shop.id, data[key]):
            raise PayloadError(f"Unknown {key}")


@transactions_bp.route("", methods=["GET"])
@login_required
def list_transactions():
    """
    List ledger entries
    ---
    tags:
      - Finances
    responses:
      200:
        description: Transactions, newest first
    """
    try:
        shop = current_tenant()
        return jsonify([transaction_to_dict(t) for t in storage.list_transactions(shop.id)])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list transactions: {e}")
        return jsonify({"message": "Error fetching transactions"}), 500


@transactions_bp.route("/recent", methods=["GET"])
@login_required
def list_recent_transactions():
    """
    GET /api/transactions/recent
    Purpose: The latest ten ledger entries for the dashboard.
    """
    try:
        shop = current_tenant()
        transactions = storage.list_transactions(shop.id, limit=RECENT_LIMIT)
        return jsonify([transaction_to_dict(t) for t in transactions])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list recent transactions: {e}")
        return jsonify({"message": "Error fetching transactions"}), 500


@transactions_bp.route("", methods=["POST"])
@login_required
def create_transaction():
    """
    Record a ledger entry
    ---
    tags:
      - Finances
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [type, amount]
          properties:
            type:
              type: string
              enum: [service, product, expense, refund]
            amount:
              type: string
              example: "55.00"
            paymentMethod:
              type: string
              enum: [cash, pix, credit, debit]
            date:
              type: string
              description: Defaults to today
            appointmentId:
              type: string
            barberId:
              type: string
            clientId:
              type: string
            category:
              type: string
            description:
              type: string
    responses:
      201:
        description: Transaction recorded
      400:
        description: Missing or invalid fields
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["type", "amount"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        shop = current_tenant()
        tx = apply_payload(Transaction(barbershop_id=shop.id), data, TRANSACTION_FIELDS)
        if tx.date is None:
            tx.date = date.today()
        check_transaction(shop, tx, data)

        db.session.add(tx)
        db.session.commit()
        return jsonify(transaction_to_dict(tx)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create transaction: {e}")
        return jsonify({"message": "Error creating transaction"}), 500


@finances_bp.route("/stats", methods=["GET"])
@login_required
def get_finance_stats():
    """
    Finance summary
    ---
    tags:
      - Finances
    responses:
      200:
        description: >
          Today's and this month's revenue, this month's expenses and refunds,
          net profit, and completed appointments not yet in the ledger
    """
    try:
        shop = current_tenant()
        return jsonify(compute_finance_stats(shop.id))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to compute finance stats: {e}")
        return jsonify({"message": "Error fetching finance stats"}), 500
