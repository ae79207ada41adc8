"""
Error taxonomy for authorization and data access.

Unauthenticated and Forbidden are HTTP exceptions so the gate can raise them
from any view and the app-level handlers in error_handler.py turn them into
redirects. ProviderFailure never leaves the gate: it is logged and re-raised
as Unauthenticated.
"""

from werkzeug.exceptions import Forbidden as _Forbidden
from werkzeug.exceptions import InternalServerError, Unauthorized


class Unauthenticated(Unauthorized):
    """No valid session for the request."""
    description = 'Please log in to access this page.'


class Forbidden(_Forbidden):
    """Valid session, but the role is not allowed in the requested area."""
    description = 'You do not have permission to access this page.'


class ProviderFailure(Exception):
    """Resolving the current session failed unexpectedly."""


class QueryFailure(InternalServerError):
    """A data read failed; shown to the (authorized) user as an error."""
    description = 'Ticket data could not be loaded. Please try again later.'
