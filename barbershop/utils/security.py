# Auth helpers (bcrypt + JWT)
from datetime import datetime, timedelta, timezone
from functools import wraps

import bcrypt
import jwt
from flask import current_app, g, jsonify, request

from ..extensions import db
from ..models import User

ALGORITHM = "HS256"


def hash_password(password: str) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())


def check_password(password: str, stored_hash) -> bool:
    if not stored_hash:
        return False
    if isinstance(stored_hash, str):
        stored_hash = stored_hash.encode("utf-8")
    return bcrypt.checkpw(password.encode("utf-8"), stored_hash)


def create_access_token(user: User) -> str:
    hours = current_app.config.get("JWT_EXPIRATION_HOURS", 24)
    payload = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=hours),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm=ALGORITHM)


def get_current_user():
    """Return the user behind the request's bearer token, or None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    try:
        payload = jwt.decode(
            token, current_app.config["SECRET_KEY"], algorithms=[ALGORITHM]
        )
    except jwt.InvalidTokenError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return db.session.get(User, user_id)


def login_required(view):
    """Reject the request with 401 unless it carries a valid token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        user = get_current_user()
        if user is None:
            return jsonify({"message": "Unauthorized"}), 401
        g.current_user = user
        return view(*args, **kwargs)

    return wrapper
