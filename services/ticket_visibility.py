"""
Which tickets a viewer may see.

Admins see every ticket. Everyone else sees only tickets whose p_number equals
their own. A viewer without a P number sees nothing: the scope is built for
UNRESOLVED_ORG_ID and matches no row.
"""

from sqlalchemy import false

from models import ADMIN_ROLE, Ticket

# P number used when the viewer's identity carries none
UNRESOLVED_ORG_ID = ''


class VisibilityScope:
    """Query restriction derived from one viewer's role and P number."""

    def __init__(self, unrestricted=False, p_number=UNRESOLVED_ORG_ID):
        self.unrestricted = unrestricted
        self.p_number = p_number

    @classmethod
    def everything(cls):
        return cls(unrestricted=True, p_number=None)

    @classmethod
    def owned_by(cls, p_number):
        return cls(unrestricted=False, p_number=(p_number or UNRESOLVED_ORG_ID))

    def predicate(self):
        """SQL filter expression for this scope, or None when unrestricted."""
        if self.unrestricted:
            return None
        if self.p_number == UNRESOLVED_ORG_ID:
            return false()
        return Ticket.p_number == self.p_number

    def apply(self, query):
        predicate = self.predicate()
        if predicate is None:
            return query
        return query.filter(predicate)

    def allows(self, ticket):
        if self.unrestricted:
            return True
        if self.p_number == UNRESOLVED_ORG_ID:
            return False
        return ticket.p_number == self.p_number

    def __eq__(self, other):
        if not isinstance(other, VisibilityScope):
            return NotImplemented
        return (self.unrestricted, self.p_number) == (other.unrestricted, other.p_number)

    def __repr__(self):
        if self.unrestricted:
            return 'VisibilityScope(unrestricted)'
        return f"VisibilityScope(p_number='{self.p_number}')"


def resolve_visibility(role, p_number):
    """Return the VisibilityScope for a viewer with the given role and P number."""
    if role == ADMIN_ROLE:
        return VisibilityScope.everything()
    return VisibilityScope.owned_by(p_number)


def scope_for(identity):
    return resolve_visibility(identity.role, identity.p_number)
