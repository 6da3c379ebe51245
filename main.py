from barbershop.api.barbershop.public import public_bp
from barbershop.api.barbershop.settings import barbershop_bp
from barbershop.api.booking.appointments import appointments_bp
from barbershop.api.booking.public_booking import public_booking_bp
from barbershop.api.catalog.products import products_bp
from barbershop.api.catalog.services import categories_bp, services_bp
from barbershop.api.clients.clients import clients_bp
from barbershop.api.dashboard.reports import reports_bp
from barbershop.api.dashboard.stats import dashboard_bp
from barbershop.api.finance.transactions import finances_bp, transactions_bp
from barbershop.api.loyalty.programs import coupons_bp, loyalty_bp, packages_bp
from barbershop.api.reviews.reviews import reviews_bp
from barbershop.api.staff.barbers import barbers_bp
from barbershop.routes.auth import auth_bp
from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from flasgger import Swagger
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE
import os

load_dotenv()
from barbershop.config import Config  # noqa: E402
from barbershop.extensions import db  # noqa: E402

BLUEPRINTS = [
    auth_bp,
    barbershop_bp,
    public_bp,
    appointments_bp,
    public_booking_bp,
    dashboard_bp,
    reports_bp,
    barbers_bp,
    services_bp,
    categories_bp,
    products_bp,
    clients_bp,
    transactions_bp,
    finances_bp,
    loyalty_bp,
    packages_bp,
    coupons_bp,
    reviews_bp,
]


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"message": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"message": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {e}")
        return jsonify({"message": "Internal server error"}), 500


def create_app(config_overrides=None):
    print("Starting create_app()")
    app = Flask(__name__)
    try:
        app.config.from_object(Config)
        # Overrides must land before db.init_app, which builds the engine
        if config_overrides:
            app.config.update(config_overrides)
        print(f"Config loaded: {len(app.config)} items")

        CORS(app)
        db.init_app(app)
        print("Database initialized")

        host = os.environ.get("API_HOST", "127.0.0.1:5000")
        swagger_template = SWAGGER_TEMPLATE.copy()
        swagger_template["host"] = host
        Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)
        print("Swagger initialized - Access at /api/docs")

        for bp in BLUEPRINTS:
            app.register_blueprint(bp)
        print(f"{len(BLUEPRINTS)} blueprints registered")

        register_error_handlers(app)

        @app.route("/")
        def home():
            """
            Root endpoint - API status
            ---
            tags:
              - Utility
            responses:
              200:
                description: API is running
                schema:
                  type: object
                  properties:
                    status:
                      type: string
                    message:
                      type: string
                    docsUrl:
                      type: string
            """
            return {
                "status": "ok",
                "message": "Barbershop backend is running!",
                "docsUrl": "/api/docs",
            }, 200

        print(f"Total routes registered: {len(list(app.url_map.iter_rules()))}")

    except Exception as e:
        print(f"Error during app creation: {e}")
        import traceback

        print(f"Full traceback: {traceback.format_exc()}")
        raise

    print("create_app() completed successfully")
    return app


app = create_app()


if __name__ == "__main__":
    # .env needs at least:
    #       DATABASE_URL=mysql+pymysql://<USER>:<PASSWORD>@<HOST>:<PORT>/barbershop
    #       SECRET_KEY=<random string>
    port = int(os.environ.get("PORT", 5000))
    app.run(
        host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") != "production"
    )
