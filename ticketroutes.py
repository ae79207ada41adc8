"""
Staff ticket console.

Sits behind the staff gate. Which tickets appear depends on the identity the
gate resolved: admins see every ticket, other staff only their own.
"""

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from decorators import staff_required
from models import TICKET_STATUSES
from services.activity_log import log_request_activity
from services.payloads import update_payload_from_form
from services.ticket_console import load_ticket_console
from services.ticket_visibility import scope_for
from services.tickets import all_updates, get_visible_ticket, record_ticket_update, validate_ticket_update

ticket_blueprint = Blueprint('tickets', __name__)


@ticket_blueprint.route('/')
@staff_required
def ticket_console():
    status = request.args.get('status')
    if status not in TICKET_STATUSES:
        status = None

    tickets, stats = load_ticket_console(g.identity, status=status)
    return render_template('tickets/console.html',
                           identity=g.identity,
                           tickets=tickets,
                           stats=stats,
                           statuses=TICKET_STATUSES,
                           status_filter=status)


@ticket_blueprint.route('/<ticket_pk>')
@staff_required
def ticket_detail(ticket_pk):
    ticket = get_visible_ticket(ticket_pk, scope_for(g.identity))
    if ticket is None:
        abort(404)
    return render_template('tickets/detail.html',
                           identity=g.identity,
                           ticket=ticket,
                           updates=all_updates(ticket),
                           statuses=TICKET_STATUSES)


@ticket_blueprint.route('/<ticket_pk>/updates', methods=['POST'])
@staff_required
def add_ticket_update(ticket_pk):
    """Update form on the detail page: note, optional status, internal flag."""
    ticket = get_visible_ticket(ticket_pk, scope_for(g.identity))
    if ticket is None:
        abort(404)

    data, errors = validate_ticket_update(update_payload_from_form(request.form))
    if errors:
        for message in errors.values():
            flash(message, 'danger')
        return redirect(url_for('tickets.ticket_detail', ticket_pk=ticket.id))

    previous_status = ticket.status
    record_ticket_update(ticket, g.identity.id, data['note'],
                         status=data['status'], is_internal=data['is_internal'])
    log_request_activity(g.identity.id, 'ticket_update', details={
        'ticket_id': ticket.ticket_id,
        'from_status': previous_status,
        'to_status': ticket.status,
    })
    flash('Ticket updated.', 'success')
    return redirect(url_for('tickets.ticket_detail', ticket_pk=ticket.id))
