"""
Who may change orders, menu, discounts and roles.

The role is read from the profiles table on every check rather than kept on
the logged-in user, so revoking admin takes effect on the next request.
"""
import logging

from extensions import db
from errors import NotFound, ValidationError
from models import Profile

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
USER_ROLE = "user"


def current_role(user_id):
    if not user_id:
        return None
    return db.session.query(Profile.role).filter_by(id=user_id).scalar()


def can_mutate_orders(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return current_role(user.get_id()) == ADMIN_ROLE


def list_users(store):
    users = store.select(
        "profiles", columns=["id", "email", "full_name", "role"], order_by="email"
    )
    admins = [u for u in users if u["role"] == ADMIN_ROLE]
    return users, admins


def _set_role(store, user_id, role):
    if not user_id:
        raise ValidationError("Please select a user")
    if not store.update("profiles", {"role": role}, {"id": user_id}):
        raise NotFound("User not found")
    logger.info("Profile %s role set to %s", user_id, role)


def grant_admin(store, user_id):
    _set_role(store, user_id, ADMIN_ROLE)


def revoke_admin(store, acting_user_id, user_id):
    if user_id == acting_user_id:
        raise ValidationError("You cannot remove your own admin role")
    _set_role(store, user_id, USER_ROLE)
