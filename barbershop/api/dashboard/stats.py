# Owner dashboard headline numbers
from flask import Blueprint, current_app, jsonify

from ...extensions import db
from ...services.stats import compute_dashboard_stats
from ...services.tenancy import current_tenant
from ...utils.security import login_required

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("/stats", methods=["GET"])
@login_required
def get_dashboard_stats():
    """
    Dashboard statistics for the owner's barbershop
    ---
    tags:
      - Dashboard
    responses:
      200:
        description: Today's and this month's figures
        schema:
          type: object
          properties:
            todayAppointments:
              type: integer
            todayRevenue:
              type: number
            monthlyRevenue:
              type: number
            newClients:
              type: integer
              description: Clients created in the last 30 days
            occupancyRate:
              type: integer
              description: Fixed at 75 until slot occupancy is computed
            pendingAppointments:
              type: integer
      401:
        description: Missing or invalid token
    """
    try:
        shop = current_tenant()
        return jsonify(compute_dashboard_stats(shop.id))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to compute dashboard stats: {e}")
        return jsonify({"message": "Error fetching dashboard stats"}), 500
