"""
Ticket persistence helpers: listing, lookup, submission and updates.
"""

import random
import re
import string
from datetime import datetime

from error_handler import query_failure_on_error
from extensions import db
from models import TICKET_STATUSES, URGENCY_LEVELS, Ticket, TicketUpdate
from services.payloads import clean, not_an_object, validate_update

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

MIN_DESCRIPTION_LENGTH = 10


def generate_ticket_id(now=None):
    """Human-readable ticket reference, e.g. TICKET-2025-7QX2K."""
    year = (now or datetime.utcnow()).year
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f'TICKET-{year}-{suffix}'


def _unique_ticket_id():
    for _ in range(10):
        candidate = generate_ticket_id()
        if not Ticket.query.filter_by(ticket_id=candidate).first():
            return candidate
    raise RuntimeError('Could not generate a unique ticket reference')


def list_tickets(scope=None, status=None, limit=None):
    """
    Tickets visible under `scope` (all tickets when scope is None), newest
    first.
    """
    query = Ticket.query
    if scope is not None:
        query = scope.apply(query)
    if status:
        query = query.filter(Ticket.status == status)
    query = query.order_by(Ticket.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


@query_failure_on_error()
def get_visible_ticket(ticket_pk, scope):
    """Return the ticket with primary key `ticket_pk` if `scope` allows it."""
    ticket = db.session.get(Ticket, ticket_pk)
    if ticket is None or not scope.allows(ticket):
        return None
    return ticket


@query_failure_on_error()
def find_by_reference(reference):
    return Ticket.query.filter_by(ticket_id=reference).first()


@query_failure_on_error()
def public_updates(ticket):
    """Updates a requester may see, oldest first."""
    return ticket.updates.filter_by(is_internal=False).order_by(TicketUpdate.created_at.asc()).all()


@query_failure_on_error()
def all_updates(ticket):
    return ticket.updates.order_by(TicketUpdate.created_at.desc()).all()


def validate_ticket_submission(payload):
    """
    Validate a ticket submission.

    Returns (data, errors); errors maps field name to message and is empty when
    the payload is valid.
    """
    if not isinstance(payload, dict):
        return {}, not_an_object()

    errors = {}
    p_number = clean(payload.get('pNumber'))
    room_number = clean(payload.get('roomNumber'))
    description = clean(payload.get('description'))
    urgency = clean(payload.get('urgency'))
    requester_email = clean(payload.get('requesterEmail'))

    if not p_number:
        errors['pNumber'] = 'P number is required.'
    if not room_number:
        errors['roomNumber'] = 'Room number is required.'
    if not description or len(description) < MIN_DESCRIPTION_LENGTH:
        errors['description'] = f'Description must be at least {MIN_DESCRIPTION_LENGTH} characters.'
    if urgency not in URGENCY_LEVELS:
        errors['urgency'] = f"Urgency must be one of: {', '.join(URGENCY_LEVELS)}."
    if requester_email and not EMAIL_PATTERN.match(requester_email):
        errors['requesterEmail'] = 'Invalid email address.'

    data = {
        'p_number': p_number,
        'room_number': room_number,
        'description': description,
        'urgency': urgency,
        'requester_name': clean(payload.get('requesterName')),
        'requester_email': requester_email,
        'category': clean(payload.get('category')),
        'subject': clean(payload.get('subject')),
    }
    return data, errors


def create_ticket(data):
    """Insert a new submitted ticket from validated submission data."""
    ticket = Ticket(
        ticket_id=_unique_ticket_id(),
        status='submitted',
        **data
    )
    db.session.add(ticket)
    db.session.commit()
    return ticket


def validate_ticket_update(payload):
    return validate_update(payload, TICKET_STATUSES)


def record_ticket_update(ticket, user_id, note, status=None, is_internal=False):
    """Apply an optional status change and append the note to the ticket history."""
    if status:
        ticket.status = status
    ticket.updated_at = datetime.utcnow()

    update = TicketUpdate(
        ticket_id=ticket.id,
        user_id=user_id,
        note=note,
        status_change=status,
        is_internal=is_internal,
    )
    db.session.add(update)
    db.session.commit()
    return update
