from flask import current_app, g, jsonify, request

from decorators import staff_required
from models import TICKET_STATUSES
from services.activity_log import log_request_activity
from services.ticket_console import load_ticket_console
from services.ticket_visibility import scope_for
from services.tickets import (
    all_updates,
    create_ticket,
    find_by_reference,
    get_visible_ticket,
    public_updates,
    record_ticket_update,
    validate_ticket_submission,
    validate_ticket_update,
)

from . import api_blueprint, expected_json_object, json_object, validation_error


@api_blueprint.route('/tickets', methods=['POST'])
def submit_ticket():
    """Public ticket submission."""
    payload = json_object()
    if payload is None:
        return expected_json_object()

    data, errors = validate_ticket_submission(payload)
    if errors:
        return validation_error(errors)

    ticket = create_ticket(data)
    current_app.logger.info(f"Ticket {ticket.ticket_id} submitted for {ticket.p_number}")
    return jsonify({'success': True, 'ticketId': ticket.ticket_id, 'id': ticket.id}), 201


@api_blueprint.route('/tickets', methods=['GET'])
def get_tickets():
    reference = request.args.get('ticketId')
    if reference:
        return _lookup_by_reference(reference)
    return _list_tickets()


def _lookup_by_reference(reference):
    """Public status lookup; internal notes are never included."""
    ticket = find_by_reference(reference)
    if ticket is None:
        return jsonify({'success': False, 'error': 'Ticket not found'}), 404

    body = ticket.to_dict()
    body['updates'] = [update.to_dict() for update in public_updates(ticket)]
    return jsonify({'success': True, 'ticket': body})


@staff_required
def _list_tickets():
    status = request.args.get('status')
    if status and status not in TICKET_STATUSES:
        return validation_error({'status': f"Status must be one of: {', '.join(TICKET_STATUSES)}."})

    tickets, stats = load_ticket_console(
        g.identity,
        status=status,
        limit=current_app.config['TICKET_LIST_LIMIT'],
    )
    return jsonify({
        'success': True,
        'tickets': [ticket.to_dict() for ticket in tickets],
        'stats': stats.to_dict(),
    })


@api_blueprint.route('/tickets/<ticket_pk>', methods=['GET'])
@staff_required
def get_ticket(ticket_pk):
    ticket = get_visible_ticket(ticket_pk, scope_for(g.identity))
    if ticket is None:
        return jsonify({'success': False, 'error': 'Ticket not found'}), 404

    body = ticket.to_dict()
    body['updates'] = [update.to_dict() for update in all_updates(ticket)]
    body['assignedUser'] = ticket.assigned_user.name if ticket.assigned_user else None
    return jsonify({'success': True, 'ticket': body})


@api_blueprint.route('/tickets/<ticket_pk>', methods=['PATCH'])
@staff_required
def update_ticket(ticket_pk):
    payload = json_object()
    if payload is None:
        return expected_json_object()

    data, errors = validate_ticket_update(payload)
    if errors:
        return validation_error(errors)

    ticket = get_visible_ticket(ticket_pk, scope_for(g.identity))
    if ticket is None:
        return jsonify({'success': False, 'error': 'Ticket not found'}), 404

    previous_status = ticket.status
    record_ticket_update(ticket, g.identity.id, data['note'],
                         status=data['status'], is_internal=data['is_internal'])
    log_request_activity(g.identity.id, 'ticket_update', details={
        'ticket_id': ticket.ticket_id,
        'from_status': previous_status,
        'to_status': ticket.status,
    })
    return jsonify({'success': True})
