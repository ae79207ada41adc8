"""
Data for the ticket console: the viewer's scoped ticket list plus the global
statistics snapshot.
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from errors import QueryFailure
from services.ticket_stats import aggregate_ticket_status
from services.ticket_visibility import scope_for
from services.tickets import list_tickets


def load_ticket_console(identity, status=None, limit=None):
    """
    Return (tickets, stats) for `identity`.

    The list is scoped to what the identity may see; the statistics cover all
    tickets. The two reads are independent and not wrapped in a transaction.
    Raises QueryFailure if either read fails.
    """
    scope = scope_for(identity)
    try:
        tickets = list_tickets(scope, status=status, limit=limit)
        stats = aggregate_ticket_status()
    except SQLAlchemyError as e:
        current_app.logger.error(
            f"Ticket console query failed for user {identity.id} ({scope!r}): {e}",
            exc_info=True,
        )
        raise QueryFailure() from e

    current_app.logger.debug(f"Ticket console for {identity!r}: {len(tickets)} tickets, {stats!r}")
    return tickets, stats
