"""
Global ticket statistics.

The snapshot always covers every ticket, whatever the viewer's scope; the
ticket list next to it is scoped. Keep it that way unless product asks for
per-viewer counts.
"""

from sqlalchemy import case, func

from extensions import db
from models import OPEN_STATUSES, Ticket


class StatisticsSnapshot:
    """Ticket counts taken from a single aggregate read."""

    def __init__(self, total=0, open=0, resolved=0, closed=0):
        self.total = total
        self.open = open
        self.resolved = resolved
        self.closed = closed

    def to_dict(self):
        return {
            'total': self.total,
            'open': self.open,
            'resolved': self.resolved,
            'closed': self.closed,
        }

    def __eq__(self, other):
        if not isinstance(other, StatisticsSnapshot):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"StatisticsSnapshot(total={self.total}, open={self.open}, "
                f"resolved={self.resolved}, closed={self.closed})")


def _count(value):
    # Drivers return None, Decimal or int depending on the backend
    return max(int(value or 0), 0)


def aggregate_ticket_status():
    """
    Count total/open/resolved/closed tickets in one statement.

    All four counts come from the same scan, so they describe the same state of
    the table and open + resolved + closed == total.
    """
    row = db.session.query(
        func.count(Ticket.id).label('total'),
        func.count(case((Ticket.status.in_(OPEN_STATUSES), 1))).label('open'),
        func.count(case((Ticket.status == 'resolved', 1))).label('resolved'),
        func.count(case((Ticket.status == 'closed', 1))).label('closed'),
    ).one()

    return StatisticsSnapshot(
        total=_count(row.total),
        open=_count(row.open),
        resolved=_count(row.resolved),
        closed=_count(row.closed),
    )
