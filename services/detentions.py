"""
Detentions: public reporting and lookup, the staff console and status updates.

Detentions carry no P number, so every signed-in staff member sees all of them.
"""

import random
import string
from datetime import datetime

from flask import current_app
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from error_handler import query_failure_on_error
from errors import QueryFailure
from extensions import db
from models import DETENTION_STATUSES, Detention, DetentionUpdate
from services.payloads import clean, not_an_object, validate_update

LOAD_FAILED = 'Detention data could not be loaded. Please try again later.'

MIN_STUDENT_NAME_LENGTH = 2
MIN_REASON_LENGTH = 10
MIN_STAFF_NAME_LENGTH = 2


def generate_detention_id(now=None):
    """Human-readable detention reference, e.g. DET-2025-4HZ9Q."""
    year = (now or datetime.utcnow()).year
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f'DET-{year}-{suffix}'


def _unique_detention_id():
    for _ in range(10):
        candidate = generate_detention_id()
        if not Detention.query.filter_by(detention_id=candidate).first():
            return candidate
    raise RuntimeError('Could not generate a unique detention reference')


def list_detentions(status=None, limit=None):
    query = Detention.query
    if status:
        query = query.filter(Detention.status == status)
    query = query.order_by(Detention.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


@query_failure_on_error(LOAD_FAILED)
def get_detention(detention_pk):
    return db.session.get(Detention, detention_pk)


@query_failure_on_error(LOAD_FAILED)
def find_detention_by_reference(reference):
    return Detention.query.filter_by(detention_id=reference).first()


@query_failure_on_error(LOAD_FAILED)
def public_detention_updates(detention):
    """Updates visible on the public lookup, oldest first."""
    return (detention.updates.filter_by(is_internal=False)
            .order_by(DetentionUpdate.created_at.asc()).all())


@query_failure_on_error(LOAD_FAILED)
def all_detention_updates(detention):
    return detention.updates.order_by(DetentionUpdate.created_at.desc()).all()


class DetentionSnapshot:
    """Detention counts per status, taken from one aggregate read."""

    def __init__(self, total=0, pending=0, confirmed=0, attended=0, missed=0):
        self.total = total
        self.pending = pending
        self.confirmed = confirmed
        self.attended = attended
        self.missed = missed

    def to_dict(self):
        return {
            'total': self.total,
            'pending': self.pending,
            'confirmed': self.confirmed,
            'attended': self.attended,
            'missed': self.missed,
        }

    def __eq__(self, other):
        if not isinstance(other, DetentionSnapshot):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"DetentionSnapshot({self.to_dict()})"


def aggregate_detention_status():
    columns = [func.count(Detention.id).label('total')]
    columns += [
        func.count(case((Detention.status == status, 1))).label(status)
        for status in DETENTION_STATUSES
    ]
    row = db.session.query(*columns).one()
    return DetentionSnapshot(**{key: max(int(value or 0), 0) for key, value in row._mapping.items()})


def load_detention_console(identity, status=None, limit=None):
    """Return (detentions, stats). Raises QueryFailure if either read fails."""
    try:
        detentions = list_detentions(status=status, limit=limit)
        stats = aggregate_detention_status()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Detention console query failed for user {identity.id}: {e}", exc_info=True)
        raise QueryFailure(LOAD_FAILED) from e
    return detentions, stats


def _parse_schedule(date_value, time_value):
    try:
        return datetime.strptime(f'{date_value} {time_value}', '%Y-%m-%d %H:%M')
    except (TypeError, ValueError):
        return None


def validate_detention_submission(payload):
    """
    Validate a detention report. detentionDate is YYYY-MM-DD and detentionTime
    is HH:MM (24 hour). Returns (data, errors).
    """
    if not isinstance(payload, dict):
        return {}, not_an_object()

    errors = {}
    student_name = clean(payload.get('studentName'))
    student_id = clean(payload.get('studentId'))
    reason = clean(payload.get('reason'))
    detention_date = clean(payload.get('detentionDate'))
    detention_time = clean(payload.get('detentionTime'))
    reporting_staff = clean(payload.get('reportingStaff'))

    if not student_name or len(student_name) < MIN_STUDENT_NAME_LENGTH:
        errors['studentName'] = f'Student name must be at least {MIN_STUDENT_NAME_LENGTH} characters.'
    if not student_id:
        errors['studentId'] = 'Student ID is required.'
    if not reason or len(reason) < MIN_REASON_LENGTH:
        errors['reason'] = f'Reason must be at least {MIN_REASON_LENGTH} characters.'
    if not reporting_staff or len(reporting_staff) < MIN_STAFF_NAME_LENGTH:
        errors['reportingStaff'] = f'Reporting staff must be at least {MIN_STAFF_NAME_LENGTH} characters.'

    scheduled = None
    if not detention_date:
        errors['detentionDate'] = 'Detention date is required.'
    if not detention_time:
        errors['detentionTime'] = 'Detention time is required.'
    if detention_date and detention_time:
        scheduled = _parse_schedule(detention_date, detention_time)
        if scheduled is None:
            errors['detentionDate'] = 'Detention date and time must be YYYY-MM-DD and HH:MM.'

    data = {
        'student_name': student_name,
        'student_id': student_id,
        'reason': reason,
        'detention_date': scheduled,
        'detention_time': detention_time,
        'reporting_staff': reporting_staff,
    }
    return data, errors


def create_detention(data):
    detention = Detention(
        detention_id=_unique_detention_id(),
        status='pending',
        **data
    )
    db.session.add(detention)
    db.session.commit()
    return detention


def validate_detention_update(payload):
    return validate_update(payload, DETENTION_STATUSES)


def record_detention_update(detention, user_id, note, status=None, is_internal=False):
    """Apply an optional status change and append the note to the detention history."""
    if status:
        detention.status = status
    detention.updated_at = datetime.utcnow()

    update = DetentionUpdate(
        detention_id=detention.id,
        user_id=user_id,
        note=note,
        status_change=status,
        is_internal=is_internal,
    )
    db.session.add(update)
    db.session.commit()
    return update
