from functools import wraps

from flask import current_app, g

from errors import Forbidden, ProviderFailure, Unauthenticated
from models import ADMIN_ROLE
from services.identity import resolve_identity


def authorize(identity, required_role=None):
    """
    Decide whether `identity` may enter an area that needs `required_role`
    (None means any signed-in staff member). Returns the identity or raises
    Unauthenticated / Forbidden.
    """
    if identity is None:
        raise Unauthenticated()
    if required_role is not None and (not identity.role or identity.role != required_role):
        raise Forbidden()
    return identity


def _resolve_or_fail_closed():
    try:
        return resolve_identity()
    except ProviderFailure as e:
        current_app.logger.error(f"Session resolution failed, treating request as unauthenticated: {e}",
                                 exc_info=True)
        raise Unauthenticated() from e


def _gate(required_role=None):
    identity = authorize(_resolve_or_fail_closed(), required_role)
    g.identity = identity
    return identity


def staff_required(f):
    """Restricts access to signed-in staff. No role check."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _gate()
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Restricts access to users with the 'admin' role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _gate(ADMIN_ROLE)
        return f(*args, **kwargs)
    return decorated_function
