# Client reviews and owner replies
from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Appointment, Barber, Client, Review
from ...services.tenancy import current_tenant
from ...utils.payloads import REVIEW_FIELDS, PayloadError, apply_payload, missing_fields
from ...utils.security import login_required
from ...utils.serializers import review_to_dict

reviews_bp = Blueprint("reviews", __name__, url_prefix="/api/reviews")

RATINGS = range(1, 6)


@reviews_bp.route("", methods=["GET"])
@login_required
def list_reviews():
    """
    List reviews
    ---
    tags:
      - Reviews
    responses:
      200:
        description: All reviews, public and private, newest first
    """
    try:
        shop = current_tenant()
        return jsonify([review_to_dict(r) for r in storage.list_reviews(shop.id)])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list reviews: {e}")
        return jsonify({"message": "Error fetching reviews"}), 500


@reviews_bp.route("/stats", methods=["GET"])
@login_required
def get_review_stats():
    """
    Rating summary
    ---
    tags:
      - Reviews
    responses:
      200:
        description: Average rating, total and how many reviews gave each rating
        schema:
          type: object
          properties:
            averageRating:
              type: number
            totalReviews:
              type: integer
            ratingDistribution:
              type: object
              example: {"1": 0, "2": 0, "3": 1, "4": 2, "5": 7}
    """
    try:
        shop = current_tenant()
        counts = storage.review_rating_counts(shop.id)
        total = sum(counts.values())
        weighted = sum(rating * count for rating, count in counts.items())

        return jsonify({
            "averageRating": round(weighted / total, 2) if total else 0,
            "totalReviews": total,
            "ratingDistribution": {str(r): counts.get(r, 0) for r in RATINGS},
        })
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to compute review stats: {e}")
        return jsonify({"message": "Error fetching review stats"}), 500


@reviews_bp.route("", methods=["POST"])
@login_required
def create_review():
    """
    Record a client's review
    ---
    tags:
      - Reviews
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [clientId, rating]
          properties:
            clientId:
              type: string
            rating:
              type: integer
              minimum: 1
              maximum: 5
            comment:
              type: string
            barberId:
              type: string
            appointmentId:
              type: string
            isPublic:
              type: boolean
    responses:
      201:
        description: Review created
      400:
        description: Missing fields or rating outside 1-5
      404:
        description: Client, barber or appointment not found
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["clientId", "rating"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        shop = current_tenant()
        review = apply_payload(Review(barbershop_id=shop.id), data, REVIEW_FIELDS)
        if review.rating not in RATINGS:
            return jsonify({"message": "rating must be between 1 and 5"}), 400

        if not storage.get_scoped(Client, shop.id, review.client_id):
            return jsonify({"message": "Client not found"}), 404
        if review.barber_id and not storage.get_scoped(Barber, shop.id, review.barber_id):
            return jsonify({"message": "Barber not found"}), 404
        if review.appointment_id and not storage.get_scoped(
            Appointment, shop.id, review.appointment_id
        ):
            return jsonify({"message": "Appointment not found"}), 404

        db.session.add(review)
        db.session.commit()
        return jsonify(review_to_dict(review)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create review: {e}")
        return jsonify({"message": "Error creating review"}), 500


@reviews_bp.route("/<review_id>/reply", methods=["PATCH"])
@login_required
def reply_to_review(review_id):
    """
    PATCH /api/reviews/<review_id>/reply
    Purpose: Set (or replace) the owner's reply. Body: {"reply": "..."}
    """
    try:
        data = request.get_json(silent=True) or {}
        reply = (data.get("reply") or "").strip()
        if not reply:
            return jsonify({"message": "reply is required"}), 400

        shop = current_tenant()
        review = storage.get_scoped(Review, shop.id, review_id)
        if not review:
            return jsonify({"message": "Review not found"}), 404

        review.reply = reply
        db.session.commit()
        return jsonify(review_to_dict(review))

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to reply to review {review_id}: {e}")
        return jsonify({"message": "Error saving reply"}), 500
