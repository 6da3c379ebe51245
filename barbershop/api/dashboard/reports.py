from flask import Blueprint, current_app, jsonify, request, send_file

from ...extensions import db
from ...services.reports import build_report_workbook, compute_report, report_filename
from ...services.tenancy import current_tenant
from ...utils.security import login_required

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@reports_bp.route("", methods=["GET"])
@login_required
def get_report():
    """
    Business report for the owner's barbershop
    ---
    tags:
      - Reports
    responses:
      200:
        description: >
          Totals, average ticket, top services and barbers, peak hours and
          revenue per day for the last 30 days
    """
    try:
        shop = current_tenant()
        return jsonify(compute_report(shop.id))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to build report: {e}")
        return jsonify({"message": "Error building report"}), 500


@reports_bp.route("/export", methods=["POST"])
@login_required
def export_report():
    """
    Download the report as an Excel workbook
    ---
    tags:
      - Reports
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            transactions:
              type: boolean
            appointments:
              type: boolean
            clients:
              type: boolean
    produces:
      - application/vnd.openxmlformats-officedocument.spreadsheetml.sheet
    responses:
      200:
        description: xlsx file. An empty body exports every sheet.
    """
    try:
        shop = current_tenant()
        sections = request.get_json(silent=True) or None
        output = build_report_workbook(shop.id, sections)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to export report: {e}")
        return jsonify({"message": "Error exporting report"}), 500

    return send_file(
        output,
        as_attachment=True,
        download_name=report_filename(),
        mimetype=XLSX_MIMETYPE,
    )
