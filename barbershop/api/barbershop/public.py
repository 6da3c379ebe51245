# Public (unauthenticated) barbershop pages used by the booking link
from flask import Blueprint, current_app, jsonify

from ... import storage
from ...utils.serializers import (
    barber_to_dict,
    public_barbershop_to_dict,
    review_to_dict,
    service_to_dict,
)

public_bp = Blueprint("public_barbershops", __name__, url_prefix="/api/barbershops")


@public_bp.route("/<slug>", methods=["GET"])
def get_public_barbershop(slug):
    """
    Public barbershop lookup by slug
    ---
    tags:
      - Public
    parameters:
      - name: slug
        in: path
        type: string
        required: true
    responses:
      200:
        description: Barbershop profile
      404:
        description: Barbershop not found
    """
    try:
        shop = storage.get_barbershop_by_slug(slug)
        if not shop:
            return jsonify({"message": "Barbershop not found"}), 404
        return jsonify(public_barbershop_to_dict(shop))
    except Exception as e:
        current_app.logger.error(f"Failed to fetch barbershop {slug}: {e}")
        return jsonify({"message": "Error fetching barbershop"}), 500


@public_bp.route("/<slug>/services", methods=["GET"])
def get_public_services(slug):
    """
    GET /api/barbershops/<slug>/services
    Purpose: Active services offered by the barbershop, for the booking page.
    """
    try:
        shop = storage.get_barbershop_by_slug(slug)
        if not shop:
            return jsonify({"message": "Barbershop not found"}), 404
        services = storage.list_services(shop.id, active_only=True)
        return jsonify([service_to_dict(s) for s in services])
    except Exception as e:
        current_app.logger.error(f"Failed to fetch services for {slug}: {e}")
        return jsonify({"message": "Error fetching services"}), 500


@public_bp.route("/<slug>/barbers", methods=["GET"])
def get_public_barbers(slug):
    """
    GET /api/barbershops/<slug>/barbers
    Purpose: Active barbers a client can pick from when booking.
    """
    try:
        shop = storage.get_barbershop_by_slug(slug)
        if not shop:
            return jsonify({"message": "Barbershop not found"}), 404
        barbers = storage.list_barbers(shop.id, active_only=True)
        return jsonify([barber_to_dict(b) for b in barbers])
    except Exception as e:
        current_app.logger.error(f"Failed to fetch barbers for {slug}: {e}")
        return jsonify({"message": "Error fetching barbers"}), 500


@public_bp.route("/<slug>/reviews", methods=["GET"])
def get_public_reviews(slug):
    """
    GET /api/barbershops/<slug>/reviews
    Purpose: Public reviews with the average rating shown on the booking page.
    """
    try:
        shop = storage.get_barbershop_by_slug(slug)
        if not shop:
            return jsonify({"message": "Barbershop not found"}), 404

        reviews = storage.list_reviews(shop.id, public_only=True)
        total = len(reviews)
        average = round(sum(r.rating for r in reviews) / total, 2) if total else 0

        return jsonify({
            "reviews": [review_to_dict(r) for r in reviews],
            "averageRating": average,
            "totalReviews": total,
        })
    except Exception as e:
        current_app.logger.error(f"Failed to fetch reviews for {slug}: {e}")
        return jsonify({"message": "Error fetching reviews"}), 500
