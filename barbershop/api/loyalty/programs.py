# Loyalty plans, prepaid packages and discount coupons
from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Client, Coupon, LoyaltyPlan, SubscriptionPackage
from ...services.loyalty import LoyaltyError, coupon_discount, redeem_reward, reward_progress
from ...services.tenancy import current_tenant
from ...utils.payloads import (
    COUPON_FIELDS,
    LOYALTY_PLAN_FIELDS,
    PACKAGE_FIELDS,
    PayloadError,
    apply_payload,
    missing_fields,
    parse_decimal,
    parse_field,
)
from ...utils.security import login_required
from ...utils.serializers import coupon_to_dict, loyalty_plan_to_dict, package_to_dict

loyalty_bp = Blueprint("loyalty_plans", __name__, url_prefix="/api/loyalty-plans")
packages_bp = Blueprint("packages", __name__, url_prefix="/api/packages")
coupons_bp = Blueprint("coupons", __name__, url_prefix="/api/coupons")

DISCOUNT_TYPES = ("percentage", "fixed")


# Loyalty plans

@loyalty_bp.route("", methods=["GET"])
@login_required
def list_loyalty_plans():
    """
    List loyalty plans
    ---
    tags:
      - Loyalty
    responses:
      200:
        description: Loyalty plans, oldest first. The first active one earns points.
    """
    try:
        shop = current_tenant()
        plans = storage.list_scoped(LoyaltyPlan, shop.id, LoyaltyPlan.created_at)
        return jsonify([loyalty_plan_to_dict(p) for p in plans])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list loyalty plans: {e}")
        return jsonify({"message": "Error fetching loyalty plans"}), 500


@loyalty_bp.route("", methods=["POST"])
@login_required
def create_loyalty_plan():
    """
    Create a loyalty plan
    ---
    tags:
      - Loyalty
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
            pointsPerCurrency:
              type: integer
              example: 1
            rewardThreshold:
              type: integer
              example: 100
            rewardValue:
              type: string
            rewardType:
              type: string
              example: discount
    responses:
      201:
        description: Plan created
    """
    try:
        data = request.get_json(silent=True) or {}
        if missing_fields(data, ["name"]):
            return jsonify({"message": "name is required"}), 400

        shop = current_tenant()
        plan = apply_payload(LoyaltyPlan(barbershop_id=shop.id), data, LOYALTY_PLAN_FIELDS)
        if plan.points_per_currency is not None and plan.points_per_currency < 0:
            raise PayloadError("pointsPerCurrency cannot be negative")
        if plan.reward_threshold is not None and plan.reward_threshold <= 0:
            raise PayloadError("rewardThreshold must be greater than zero")
        db.session.add(plan)
        db.session.commit()
        return jsonify(loyalty_plan_to_dict(plan)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create loyalty plan: {e}")
        return jsonify({"message": "Error creating loyalty plan"}), 500


@loyalty_bp.route("/<plan_id>/redeem", methods=["POST"])
@login_required
def redeem_loyalty_reward(plan_id):
    """
    Redeem a client's reward
    ---
    tags:
      - Loyalty
    parameters:
      - name: plan_id
        in: path
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [clientId]
          properties:
            clientId:
              type: string
    responses:
      200:
        description: Points deducted and the client's remaining progress
      400:
        description: Not enough points or inactive plan
      404:
        description: Plan or client not found
    """
    try:
        data = request.get_json(silent=True) or {}
        if missing_fields(data, ["clientId"]):
            return jsonify({"message": "clientId is required"}), 400

        shop = current_tenant()
        plan = storage.get_scoped(LoyaltyPlan, shop.id, plan_id)
        if not plan:
            return jsonify({"message": "Loyalty plan not found"}), 404
        client = storage.get_scoped(Client, shop.id, data["clientId"])
        if not client:
            return jsonify({"message": "Client not found"}), 404

        redeemed = redeem_reward(client, plan)
        db.session.commit()
        current_app.logger.info(f"Client {client.id} redeemed {redeemed} points on plan {plan.id}")
        return jsonify({"pointsRedeemed": redeemed, **reward_progress(client, plan)})

    except LoyaltyError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to redeem reward on plan {plan_id}: {e}")
        return jsonify({"message": "Error redeeming reward"}), 500


# Prepaid packages

@packages_bp.route("", methods=["GET"])
@login_required
def list_packages():
    """
    GET /api/packages
    Purpose: Prepaid service packages on offer.
    """
    try:
        shop = current_tenant()
        packages = storage.list_scoped(SubscriptionPackage, shop.id, SubscriptionPackage.name)
        return jsonify([package_to_dict(p) for p in packages])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list packages: {e}")
        return jsonify({"message": "Error fetching packages"}), 500


@packages_bp.route("", methods=["POST"])
@login_required
def create_package():
    """
    Create a prepaid package
    ---
    tags:
      - Loyalty
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, price, credits]
          properties:
            name:
              type: string
            price:
              type: string
            credits:
              type: integer
            validityDays:
              type: integer
            includedServices:
              type: array
              items:
                type: string
    responses:
      201:
        description: Package created
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["name", "price", "credits"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        shop = current_tenant()
        package = apply_payload(
            SubscriptionPackage(barbershop_id=shop.id), data, PACKAGE_FIELDS
        )
        if package.credits <= 0:
            raise PayloadError("credits must be greater than zero")
        db.session.add(package)
        db.session.commit()
        return jsonify(package_to_dict(package)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create package: {e}")
        return jsonify({"message": "Error creating package"}), 500


# Coupons

@coupons_bp.route("", methods=["GET"])
@login_required
def list_coupons():
    """
    GET /api/coupons
    Purpose: All coupons, newest first.
    """
    try:
        shop = current_tenant()
        coupons = storage.list_scoped(Coupon, shop.id, Coupon.created_at.desc())
        return jsonify([coupon_to_dict(c) for c in coupons])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list coupons: {e}")
        return jsonify({"message": "Error fetching coupons"}), 500


@coupons_bp.route("", methods=["POST"])
@login_required
def create_coupon():
    """
    Create a coupon
    ---
    tags:
      - Loyalty
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [code, discountValue]
          properties:
            code:
              type: string
              example: VERAO10
            discountType:
              type: string
              enum: [percentage, fixed]
            discountValue:
              type: string
              example: "10"
            minPurchase:
              type: string
            maxUses:
              type: integer
            validFrom:
              type: string
            validUntil:
              type: string
    responses:
      201:
        description: Coupon created
      400:
        description: Invalid fields or code already used by this barbershop
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["code", "discountValue"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        shop = current_tenant()
        if storage.get_coupon_by_code(shop.id, str(data["code"])):
            return jsonify({"message": "Coupon code already exists"}), 400

        coupon = apply_payload(Coupon(barbershop_id=shop.id), data, COUPON_FIELDS)
        coupon.code = coupon.code.strip().upper()
        coupon.discount_type = coupon.discount_type or "percentage"
        if coupon.discount_type not in DISCOUNT_TYPES:
            raise PayloadError("discountType must be 'percentage' or 'fixed'")
        if coupon.discount_value <= 0:
            raise PayloadError("discountValue must be greater than zero")
        if coupon.discount_type == "percentage" and coupon.discount_value > 100:
            raise PayloadError("A percentage discount cannot exceed 100")
        if coupon.valid_from and coupon.valid_until and coupon.valid_until < coupon.valid_from:
            raise PayloadError("validUntil must not be before validFrom")

        db.session.add(coupon)
        db.session.commit()
        return jsonify(coupon_to_dict(coupon)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create coupon: {e}")
        return jsonify({"message": "Error creating coupon"}), 500


@coupons_bp.route("/<code>/preview", methods=["GET"])
@login_required
def preview_coupon(code):
    """
    Preview a coupon applied to an amount
    ---
    tags:
      - Loyalty
    parameters:
      - name: code
        in: path
        type: string
        required: true
      - name: amount
        in: query
        type: string
        required: true
        example: "55.00"
    responses:
      200:
        description: Discount and the amount left to pay
      400:
        description: Missing amount, or the coupon cannot be applied
      404:
        description: Coupon not found
    """
    try:
        amount = parse_field(request.args, "amount", parse_decimal)
        if amount is None or amount < 0:
            return jsonify({"message": "A non-negative amount is required"}), 400

        shop = current_tenant()
        coupon = storage.get_coupon_by_code(shop.id, code)
        if not coupon:
            return jsonify({"message": "Coupon not found"}), 404

        discount = coupon_discount(coupon, amount)
        return jsonify({
            "code": coupon.code,
            "amount": float(amount),
            "discount": float(discount),
            "finalAmount": float(amount - discount),
        })

    except ValueError as e:
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to preview coupon {code}: {e}")
        return jsonify({"message": "Error previewing coupon"}), 500
