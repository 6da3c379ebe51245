from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..utils.security import (
    check_password,
    create_access_token,
    hash_password,
    login_required,
)
from ..utils.serializers import user_to_dict

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/signup", methods=["POST"])
def signup_user():
    """
    Register a barbershop owner account
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password, firstName]
          properties:
            email:
              type: string
            password:
              type: string
            firstName:
              type: string
            lastName:
              type: string
            phone:
              type: string
    responses:
      201:
        description: Account created, returns the user and an access token
      400:
        description: Missing fields or email already registered
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email") or ""
        password = data.get("password")
        first_name = data.get("firstName")

        if not isinstance(email, str) or (password and not isinstance(password, str)):
            return jsonify({"message": "Email and password must be strings"}), 400
        email = email.strip().lower()

        if not email or not password or not first_name:
            return jsonify({
                "message": "Missing required fields (email, password, firstName)"
            }), 400

        existing = db.session.scalar(select(User).where(User.email == email))
        if existing:
            return jsonify({"message": "Email already exists"}), 400

        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=data.get("lastName"),
            phone=data.get("phone"),
            role="owner",
        )
        db.session.add(user)
        db.session.commit()

        return jsonify({
            "message": "User registered successfully",
            "user": user_to_dict(user),
            "token": create_access_token(user),
        }), 201

    except IntegrityError:
        db.session.rollback()
        return jsonify({"message": "Email already exists"}), 400

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Signup failed: {e}")
        return jsonify({"message": "Error creating account"}), 500


@auth_bp.route("/login", methods=["POST"])
def login_user():
    """
    Exchange email and password for an access token
    ---
    tags:
      - Authentication
    responses:
      200:
        description: Login successful
      400:
        description: Email and password required
      401:
        description: Invalid credentials
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email") or ""
        password = data.get("password")

        if not isinstance(email, str) or (password and not isinstance(password, str)):
            return jsonify({"message": "Email and password must be strings"}), 400
        email = email.strip().lower()
        if not email or not password:
            return jsonify({"message": "Email and password required"}), 400

        user = db.session.scalar(select(User).where(User.email == email))
        if not user or not check_password(password, user.password_hash):
            return jsonify({"message": "Invalid credentials"}), 401

        return jsonify({
            "message": "Login successful",
            "token": create_access_token(user),
            "user": user_to_dict(user),
        }), 200

    except Exception as e:
        current_app.logger.error(f"Login failed: {e}")
        return jsonify({"message": "Error logging in"}), 500


@auth_bp.route("/user", methods=["GET"])
@login_required
def get_authenticated_user():
    """
    Current user
    ---
    tags:
      - Authentication
    responses:
      200:
        description: The authenticated user
      401:
        description: Missing or invalid token
    """
    return jsonify(user_to_dict(g.current_user))
