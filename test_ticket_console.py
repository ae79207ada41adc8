from types import SimpleNamespace

from sqlalchemy.exc import OperationalError, SQLAlchemyError

import services.ticket_console as console_module
import services.tickets as tickets_module
from conftest import identity_for, login
from extensions import db
from models import Ticket, TicketUpdate
from services.ticket_console import load_ticket_console


def test_staff_console_lists_own_tickets_with_global_stats(staff_user, seeded_tickets):
    tickets, stats = load_ticket_console(identity_for(staff_user))

    assert [t.status for t in tickets] == ['closed', 'resolved', 'submitted']
    assert {t.p_number for t in tickets} == {'P123'}
    assert stats.total == 5
    assert stats.to_dict() == {'total': 5, 'open': 3, 'resolved': 1, 'closed': 1}


def test_admin_console_lists_every_ticket(admin_user, seeded_tickets):
    tickets, stats = load_ticket_console(identity_for(admin_user))

    assert len(tickets) == 5
    assert {t.p_number for t in tickets} == {'P123', 'P456'}
    assert [t.created_at for t in tickets] == sorted((t.created_at for t in tickets), reverse=True)
    assert stats.total == 5


def test_staff_without_p_number_gets_empty_list_but_stats(make_user, seeded_tickets):
    user = make_user('P000')
    user.p_number = ''
    tickets, stats = load_ticket_console(identity_for(user))
    assert tickets == []
    assert stats.total == 5


def test_console_page_renders_scoped_tickets(client, staff_user, seeded_tickets):
    login(client, staff_user)
    response = client.get('/dashboard/tickets/')
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    own = [t.ticket_id for t in seeded_tickets if t.p_number == 'P123']
    others = [t.ticket_id for t in seeded_tickets if t.p_number == 'P456']
    for ticket_id in own:
        assert ticket_id in body
    for ticket_id in others:
        assert ticket_id not in body
    # newest first
    positions = [body.index(ticket_id) for ticket_id in reversed(own)]
    assert positions == sorted(positions)


def test_console_status_filter(client, staff_user, seeded_tickets):
    login(client, staff_user)
    body = client.get('/dashboard/tickets/?status=resolved').get_data(as_text=True)
    resolved = [t.ticket_id for t in seeded_tickets if t.p_number == 'P123' and t.status == 'resolved']
    closed = [t.ticket_id for t in seeded_tickets if t.p_number == 'P123' and t.status == 'closed']
    assert resolved[0] in body
    assert closed[0] not in body


def test_admin_sees_all_tickets_on_staff_console(client, admin_user, seeded_tickets):
    login(client, admin_user)
    body = client.get('/dashboard/tickets/').get_data(as_text=True)
    for ticket in seeded_tickets:
        assert ticket.ticket_id in body


def test_query_failure_is_shown_not_redirected(client, staff_user, monkeypatch):
    def broken_aggregate():
        raise SQLAlchemyError('connection reset')

    monkeypatch.setattr(console_module, 'aggregate_ticket_status', broken_aggregate)
    login(client, staff_user)

    response = client.get('/dashboard/tickets/')
    assert response.status_code == 500
    assert b'Ticket data could not be loaded' in response.data

    api_response = client.get('/api/tickets')
    assert api_response.status_code == 500
    assert api_response.get_json()['success'] is False


def test_ticket_detail_is_scoped(client, staff_user, seeded_tickets):
    login(client, staff_user)
    own = next(t for t in seeded_tickets if t.p_number == 'P123')
    other = next(t for t in seeded_tickets if t.p_number == 'P456')

    assert client.get(f'/dashboard/tickets/{own.id}').status_code == 200
    assert client.get(f'/dashboard/tickets/{other.id}').status_code == 404


class UnreachableSession:
    def get(self, *args, **kwargs):
        raise OperationalError('SELECT tickets', {}, Exception('connection lost'))


def test_ticket_detail_read_failure_is_shown(client, staff_user, make_ticket, monkeypatch):
    ticket = make_ticket('P123')
    login(client, staff_user)
    monkeypatch.setattr(tickets_module, 'db', SimpleNamespace(session=UnreachableSession()))

    response = client.get(f'/dashboard/tickets/{ticket.id}')
    assert response.status_code == 500
    assert b'Ticket data could not be loaded' in response.data

    api_response = client.get(f'/api/tickets/{ticket.id}')
    assert api_response.status_code == 500
    assert api_response.get_json()['error'].startswith('Ticket data could not be loaded')

    api_response = client.patch(f'/api/tickets/{ticket.id}', json={'note': 'Checked the cable.'})
    assert api_response.status_code == 500


def test_ticket_detail_has_update_form(client, staff_user, make_ticket):
    ticket = make_ticket('P123')
    login(client, staff_user)

    body = client.get(f'/dashboard/tickets/{ticket.id}').get_data(as_text=True)

    assert f'/dashboard/tickets/{ticket.id}/updates' in body
    assert '<option value="in_progress"' in body
    assert '<option value="submitted" selected>' in body


def test_update_form_records_status_and_internal_note(client, staff_user, make_ticket):
    ticket = make_ticket('P123')
    login(client, staff_user)

    response = client.post(f'/dashboard/tickets/{ticket.id}/updates',
                           data={'note': 'Lamp ordered from vendor.', 'status': 'in_progress', 'isInternal': 'on'})

    assert response.status_code == 302
    assert response.headers['Location'] == f'/dashboard/tickets/{ticket.id}'
    update = TicketUpdate.query.filter_by(ticket_id=ticket.id).one()
    assert update.is_internal is True
    assert update.status_change == 'in_progress'
    assert db.session.get(Ticket, ticket.id).status == 'in_progress'


def test_update_form_rejects_short_note_and_other_owners(client, staff_user, make_ticket):
    own = make_ticket('P123')
    other = make_ticket('P456')
    login(client, staff_user)

    response = client.post(f'/dashboard/tickets/{own.id}/updates', data={'note': 'ok', 'status': 'closed'})
    assert response.status_code == 302
    assert client.post(f'/dashboard/tickets/{other.id}/updates',
                       data={'note': 'Closing this one.', 'status': 'closed'}).status_code == 404
    assert TicketUpdate.query.count() == 0
    assert db.session.get(Ticket, own.id).status == 'submitted'
