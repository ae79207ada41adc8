from urllib.parse import parse_qs, urlparse

import pytest

import services.identity as identity_module
import ticketroutes
from conftest import identity_for, login
from decorators import authorize
from errors import Forbidden, Unauthenticated
from models import ADMIN_ROLE
from services.identity import Identity


class ExplodingUser:
    """Stands in for current_user when the session cannot be loaded."""

    @property
    def is_authenticated(self):
        raise RuntimeError('session store unavailable')


def test_authorize_without_identity_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        authorize(None)
    with pytest.raises(Unauthenticated):
        authorize(None, ADMIN_ROLE)


def test_authorize_staff_gate_skips_role_check():
    identity = Identity('1', 'No Role', None, None, 'P1')
    assert authorize(identity) is identity


def test_authorize_admin_gate_requires_admin_role():
    staff = Identity('1', 'Staff', None, 'staff', 'P1')
    no_role = Identity('2', 'No Role', None, '', 'P2')
    admin = Identity('3', 'Admin', None, ADMIN_ROLE, 'P3')

    with pytest.raises(Forbidden):
        authorize(staff, ADMIN_ROLE)
    with pytest.raises(Forbidden):
        authorize(no_role, ADMIN_ROLE)
    assert authorize(admin, ADMIN_ROLE) is admin


def test_identity_is_read_only(staff_user):
    identity = identity_for(staff_user)
    with pytest.raises(AttributeError):
        identity.role = ADMIN_ROLE


def test_no_session_redirects_to_login_without_querying(client, monkeypatch, seeded_tickets):
    calls = []
    monkeypatch.setattr(ticketroutes, 'load_ticket_console', lambda *a, **kw: calls.append(a))

    response = client.get('/dashboard/tickets/')

    assert response.status_code == 302
    assert response.headers['Location'].startswith('/login')
    assert calls == []


def test_login_redirect_keeps_the_query_string(client):
    response = client.get('/dashboard/tickets/?status=resolved')

    location = urlparse(response.headers['Location'])
    assert location.path == '/login'
    assert parse_qs(location.query)['next'] == ['/dashboard/tickets/?status=resolved']

    location = urlparse(client.get('/dashboard').headers['Location'])
    assert parse_qs(location.query)['next'] == ['/dashboard']


def test_staff_gate_admits_any_signed_in_user(client, staff_user):
    login(client, staff_user)
    response = client.get('/dashboard')
    assert response.status_code == 200
    assert b'Dana Staff' in response.data


def test_staff_on_admin_area_goes_to_dashboard_not_login(client, staff_user):
    login(client, staff_user)

    for path in ('/admin/', '/admin/tickets', '/admin/detentions', '/admin/activity'):
        response = client.get(path)
        assert response.status_code == 302
        assert response.headers['Location'] == '/dashboard'


def test_user_without_role_is_forbidden_from_admin_area(client, make_user):
    user = make_user('P777', role='')
    login(client, user)
    response = client.get('/admin/tickets')
    assert response.status_code == 302
    assert response.headers['Location'] == '/dashboard'


def test_admin_passes_admin_gate(client, admin_user):
    login(client, admin_user)
    assert client.get('/admin/').status_code == 200
    assert client.get('/admin/tickets').status_code == 200
    assert client.get('/admin/detentions').status_code == 200


def test_provider_failure_fails_closed(client, staff_user, monkeypatch):
    login(client, staff_user)
    monkeypatch.setattr(identity_module, 'current_user', ExplodingUser())

    response = client.get('/dashboard/tickets/')

    assert response.status_code == 302
    assert response.headers['Location'].startswith('/login')


def test_stale_session_for_deleted_user_is_unauthenticated(client):
    with client.session_transaction() as sess:
        sess['_user_id'] = 'no-such-user'
    response = client.get('/dashboard')
    assert response.status_code == 302
    assert response.headers['Location'].startswith('/login')


def test_api_answers_json_instead_of_redirecting(client, staff_user):
    response = client.get('/api/tickets')
    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'error': 'Unauthorized'}

    login(client, staff_user)
    assert client.get('/api/tickets').status_code == 200
