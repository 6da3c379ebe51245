# Retail products sold over the counter
from flask import Blueprint, current_app, jsonify, request

from ... import storage
from ...extensions import db
from ...models import Product
from ...services.tenancy import current_tenant
from ...utils.payloads import PRODUCT_FIELDS, PayloadError, apply_payload, missing_fields
from ...utils.security import login_required
from ...utils.serializers import product_to_dict

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.route("", methods=["GET"])
@login_required
def list_products():
    """
    List products
    ---
    tags:
      - Products
    responses:
      200:
        description: Products ordered by name, each flagged when stock is low
    """
    try:
        shop = current_tenant()
        products = storage.list_scoped(Product, shop.id, Product.name)
        return jsonify([product_to_dict(p) for p in products])
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list products: {e}")
        return jsonify({"message": "Error fetching products"}), 500


@products_bp.route("", methods=["POST"])
@login_required
def create_product():
    """
    Add a product
    ---
    tags:
      - Products
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, price]
          properties:
            name:
              type: string
            price:
              type: string
            costPrice:
              type: string
            stockQuantity:
              type: integer
            lowStockThreshold:
              type: integer
            sku:
              type: string
    responses:
      201:
        description: Product created
    """
    try:
        data = request.get_json(silent=True) or {}
        missing = missing_fields(data, ["name", "price"])
        if missing:
            return jsonify({"message": f"Missing required fields: {', '.join(missing)}"}), 400

        shop = current_tenant()
        product = apply_payload(Product(barbershop_id=shop.id), data, PRODUCT_FIELDS)
        if product.stock_quantity is not None and product.stock_quantity < 0:
            raise PayloadError("stockQuantity cannot be negative")
        db.session.add(product)
        db.session.commit()
        return jsonify(product_to_dict(product)), 201

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create product: {e}")
        return jsonify({"message": "Error creating product"}), 500


@products_bp.route("/<product_id>", methods=["PATCH"])
@login_required
def update_product(product_id):
    """
    PATCH /api/products/<product_id>
    Purpose: Partial update, typically a price change or a stock count.
    """
    try:
        data = request.get_json(silent=True) or {}
        shop = current_tenant()
        product = storage.get_scoped(Product, shop.id, product_id)
        if not product:
            return jsonify({"message": "Product not found"}), 404

        apply_payload(product, data, PRODUCT_FIELDS)
        if product.stock_quantity is not None and product.stock_quantity < 0:
            raise PayloadError("stockQuantity cannot be negative")
        db.session.commit()
        return jsonify(product_to_dict(product))

    except PayloadError as e:
        db.session.rollback()
        return jsonify({"message": str(e)}), 400
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update product {product_id}: {e}")
        return jsonify({"message": "Error updating product"}), 500
