"""
Import of legacy IT tickets exported from the old spreadsheet tracker.

The export's headers carry emoji prefixes ("🆔 Ticket ID"); headers are matched
on their text only.
"""

import csv
import logging
import re
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Ticket

logger = logging.getLogger(__name__)

ROOM_NUMBER_MAX = 50

PROPER_NOUNS = [
    'FLHS', 'IT', 'Windows', 'Mac', 'Excel', 'PowerPoint', 'PPT',
    'Teams', 'Canvas', 'Clever', 'Focus', 'OneNote', 'FileMaker',
    'Promethean', 'Recordex', 'Polycom', 'Lexmark', 'Dell', 'HP',
    'USB', 'HDMI', 'Ethernet', 'WiFi', 'VCR', 'DVD',
    'AED', 'CPST', 'SAC', 'SAF', 'SOAR', 'AICE', 'BCPS',
]

CONTRACTIONS = [
    (re.compile(r'\bi\b'), 'I'),
    (re.compile(r'\bim\b'), "I'm"),
    (re.compile(r'\bid\b'), "I'd"),
    (re.compile(r'\bive\b'), "I've"),
]

LOWERCASE_PARTICLES = ('da', 'de', 'dos', 'das')

DATE_FORMATS = (
    '%m/%d/%Y %I:%M %p',
    '%m/%d/%Y %I:%M:%S %p',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d',
)


def normalize_text(text):
    """Collapse whitespace, capitalise the first letter and fix common terms."""
    if not text:
        return ''
    normalized = re.sub(r'\s+', ' ', text.strip())
    if normalized and normalized[0].islower():
        normalized = normalized[0].upper() + normalized[1:]
    for pattern, replacement in CONTRACTIONS:
        normalized = pattern.sub(replacement, normalized)
    for noun in PROPER_NOUNS:
        normalized = re.sub(rf'\b{re.escape(noun)}\b', noun, normalized, flags=re.IGNORECASE)
    return normalized


def normalize_name(name):
    if not name:
        return ''
    words = re.sub(r'\s+', ' ', name.strip()).split(' ')
    return ' '.join(
        word.lower() if word.lower() in LOWERCASE_PARTICLES else word[:1].upper() + word[1:].lower()
        for word in words if word
    )


def map_urgency(value):
    urgency = (value or '').lower().strip()
    if 'asap' in urgency or 'same-day' in urgency:
        return 'critical'
    if '1-2 days' in urgency or '1–2 days' in urgency or 'important' in urgency:
        return 'high'
    if 'week' in urgency or 'routine' in urgency or 'any time' in urgency:
        return 'low'
    return 'medium'


def map_status(value):
    """Legacy status to ticket status. 'Closed' in the old tracker meant resolved."""
    status = (value or '').lower().strip()
    if 'closed' in status:
        return 'resolved'
    if 'progress' in status:
        return 'in_progress'
    if 'open' in status:
        return 'submitted'
    return 'resolved'


def parse_date(value):
    if not value or not value.strip():
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    logger.warning(f"Invalid date: {value}")
    return None


def _truncate(value):
    return value if len(value) <= ROOM_NUMBER_MAX else value[:ROOM_NUMBER_MAX - 3] + '...'


def build_room_number(building, room):
    building = (building or '').strip()
    room = (room or '').strip()

    if 'bld' in room.lower() or 'building' in room.lower():
        return _truncate(room)

    # Lists or ranges of rooms are kept as written
    if any(sep in room for sep in (',', '-', '/')):
        if len(room) > ROOM_NUMBER_MAX:
            first_part = re.split(r'[,/]', room)[0].strip()
            if len(first_part) <= ROOM_NUMBER_MAX:
                return first_part
            return _truncate(room)
        return room

    if building and room:
        return _truncate(f'{building}-{room}')
    if room:
        return _truncate(room)
    if building:
        return f'BLD {building}'
    return ''


def _header_key(header):
    return re.sub(r'^[^A-Za-z0-9]+', '', header or '').strip().lower()


def _normalise_row(row):
    return {_header_key(key): (value or '') for key, value in row.items() if key is not None}


def ticket_from_row(row):
    """Build an unsaved Ticket from one CSV row, or None when it has no ticket id."""
    row = _normalise_row(row)
    ticket_id = row.get('ticket id', '').strip()
    if not ticket_id:
        return None

    status = map_status(row.get('status'))
    submitted = parse_date(row.get('submission time'))
    completed = parse_date(row.get('completed time'))
    created_at = submitted or datetime.utcnow()
    updated_at = completed if (status == 'resolved' and completed) else created_at

    building = normalize_text(row.get('bld'))
    return Ticket(
        ticket_id=ticket_id,
        requester_name=normalize_name(row.get('staff name')) or None,
        room_number=build_room_number(building, normalize_text(row.get('room number'))) or None,
        description=normalize_text(row.get('it issue')) or 'No description provided',
        urgency=map_urgency(row.get('urgency')),
        status=status,
        created_at=created_at,
        updated_at=updated_at,
    )


def import_tickets_from_csv(path):
    """
    Import tickets from a legacy CSV export. Tickets whose reference already
    exists are skipped. Returns a summary dict.
    """
    summary = {'total': 0, 'imported': 0, 'skipped': 0, 'errors': 0}

    with open(path, newline='', encoding='utf-8-sig') as handle:
        for row in csv.DictReader(handle):
            summary['total'] += 1
            ticket = ticket_from_row(row)
            if ticket is None:
                logger.warning("Skipping row with no ticket ID")
                summary['skipped'] += 1
                continue
            if Ticket.query.filter_by(ticket_id=ticket.ticket_id).first():
                logger.info(f"Ticket {ticket.ticket_id} already exists, skipping")
                summary['skipped'] += 1
                continue
            try:
                db.session.add(ticket)
                db.session.commit()
                summary['imported'] += 1
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(f"Error importing ticket {ticket.ticket_id}: {e}")
                summary['errors'] += 1

    return summary
