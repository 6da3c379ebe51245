import uuid

from flask import current_app, g
from sqlalchemy.exc import IntegrityError

from .. import storage
from ..extensions import db
from ..models import Barbershop

DEFAULT_SHOP_NAME = "Minha Barbearia"


def default_shop_name(user):
    if user.first_name:
        return f"{user.first_name}'s Barbearia"
    return DEFAULT_SHOP_NAME


def default_slug(user_id):
    return f"barbershop-{user_id[:8]}"


def resolve_tenant(user):
    """
    Return the barbershop owned by ``user``, provisioning it on first access.

    The insert is guarded by the unique index on ``owner_id``: when a
    concurrent request wins the race the insert fails, the session is rolled
    back and the winner's row is returned. A slug already taken by another
    owner gets a short random suffix on the second attempt.
    """
    user_id = user.id
    shop = storage.get_barbershop_by_owner(user_id)
    if shop:
        return shop

    name = default_shop_name(user)
    slug = default_slug(user_id)
    attempts = 2
    for attempt in range(attempts):
        try:
            shop = Barbershop(owner_id=user_id, name=name, slug=slug)
            db.session.add(shop)
            db.session.commit()
            current_app.logger.info(f"Provisioned barbershop {shop.slug} for user {user_id}")
            return shop
        except IntegrityError:
            db.session.rollback()
            existing = storage.get_barbershop_by_owner(user_id)
            if existing:
                return existing
            if attempt == attempts - 1:
                raise
            slug = f"{default_slug(user_id)}-{uuid.uuid4().hex[:4]}"


def current_tenant():
    """Barbershop of the user authenticated by ``login_required``."""
    return resolve_tenant(g.current_user)
