from datetime import datetime, timedelta

import pytest
from flask import g
from flask.testing import FlaskClient
from werkzeug.security import generate_password_hash

from app import create_app
from config import TestingConfig
from extensions import db
from models import ADMIN_ROLE, STAFF_ROLE, Detention, Ticket, User
from services.identity import Identity

BASE_TIME = datetime(2025, 4, 1, 8, 0, 0)
PASSWORD = 'Sup3rSecret!'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


class FreshGlobalsClient(FlaskClient):
    """
    Test client that clears `g` before every request.

    The app fixture keeps an app context pushed, and Flask reuses it for test
    requests, so the user Flask-Login cached on `g` would otherwise leak from
    one request to the next.
    """

    def open(self, *args, **kwargs):
        g.__dict__.clear()
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    app.test_client_class = FreshGlobalsClient
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(p_number, role=STAFF_ROLE, name=None, email=None, password=PASSWORD):
        user = User(
            p_number=p_number,
            name=name or f'Staff {p_number}',
            email=email,
            role=role,
            password_hash=generate_password_hash(password),
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def make_ticket(app):
    counter = {'n': 0}

    def _make_ticket(p_number, status='submitted', created_at=None, **fields):
        counter['n'] += 1
        created_at = created_at or BASE_TIME + timedelta(hours=counter['n'])
        ticket = Ticket(
            ticket_id=fields.pop('ticket_id', f"TICKET-2025-T{counter['n']:04d}"),
            p_number=p_number,
            description=fields.pop('description', 'Projector will not turn on in my room.'),
            urgency=fields.pop('urgency', 'medium'),
            status=status,
            created_at=created_at,
            updated_at=fields.pop('updated_at', created_at),
            **fields
        )
        db.session.add(ticket)
        db.session.commit()
        return ticket
    return _make_ticket


@pytest.fixture
def make_detention(app):
    counter = {'n': 0}

    def _make_detention(status='pending', created_at=None, **fields):
        counter['n'] += 1
        created_at = created_at or BASE_TIME + timedelta(hours=counter['n'])
        detention = Detention(
            detention_id=fields.pop('detention_id', f"DET-2025-D{counter['n']:04d}"),
            student_name=fields.pop('student_name', 'Jordan Student'),
            student_id=fields.pop('student_id', f"S{counter['n']:05d}"),
            reason=fields.pop('reason', 'Repeatedly late to first period.'),
            detention_date=fields.pop('detention_date', BASE_TIME + timedelta(days=2)),
            detention_time=fields.pop('detention_time', '15:30'),
            reporting_staff=fields.pop('reporting_staff', 'Dana Staff'),
            status=status,
            created_at=created_at,
            updated_at=created_at,
            **fields
        )
        db.session.add(detention)
        db.session.commit()
        return detention
    return _make_detention


@pytest.fixture
def staff_user(make_user):
    return make_user('P123', name='Dana Staff', email='dana@example.org')


@pytest.fixture
def other_staff_user(make_user):
    return make_user('P456', name='Lee Staff')


@pytest.fixture
def admin_user(make_user):
    return make_user('P999', role=ADMIN_ROLE, name='Ari Admin')


@pytest.fixture
def seeded_tickets(make_ticket):
    """Three tickets owned by P123 and two by P456, created an hour apart."""
    return [
        make_ticket('P123', 'submitted'),
        make_ticket('P456', 'in_progress'),
        make_ticket('P123', 'resolved'),
        make_ticket('P456', 'submitted'),
        make_ticket('P123', 'closed'),
    ]


def login(client, user):
    """Put `user` in the Flask-Login session without going through the form."""
    with client.session_transaction() as sess:
        sess['_user_id'] = user.id
        sess['_fresh'] = True


def identity_for(user):
    return Identity.from_user(user)
