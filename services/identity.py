"""
Resolved identity for the current request.

The session is read once per request by the authorization gate and turned into
an immutable Identity; everything downstream (ticket scoping, templates, API
payloads) works from that value instead of re-reading current_user.
"""

from flask_login import current_user

from errors import ProviderFailure
from models import ADMIN_ROLE


class Identity:
    """Read-only view of the signed-in staff member."""

    __slots__ = ('id', 'name', 'email', 'role', 'p_number')

    def __init__(self, id, name, email, role, p_number=None):
        object.__setattr__(self, 'id', id)
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'email', email)
        object.__setattr__(self, 'role', role)
        object.__setattr__(self, 'p_number', p_number)

    def __setattr__(self, name, value):
        raise AttributeError('Identity is read-only')

    @property
    def is_admin(self):
        return self.role == ADMIN_ROLE

    @classmethod
    def from_user(cls, user):
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email or user.p_number,
            role=user.role,
            p_number=user.p_number,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'pNumber': self.p_number,
        }

    def __eq__(self, other):
        if not isinstance(other, Identity):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.id, self.role, self.p_number))

    def __repr__(self):
        return f"Identity('{self.p_number}', '{self.role}')"


def resolve_identity():
    """
    Return the Identity behind the current session, or None when there is no
    session. Any failure while loading the session (database error, malformed
    session data) is raised as ProviderFailure.
    """
    try:
        if not current_user or not current_user.is_authenticated:
            return None
        return Identity.from_user(current_user)
    except Exception as e:
        raise ProviderFailure(f'Could not resolve session: {e}') from e
