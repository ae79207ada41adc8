"""
Staff detention console.

Every signed-in staff member sees all detentions; there is no owner key to
scope them by.
"""

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from decorators import staff_required
from models import DETENTION_STATUSES
from services.activity_log import log_request_activity
from services.detentions import (
    all_detention_updates,
    get_detention,
    load_detention_console,
    record_detention_update,
    validate_detention_update,
)
from services.payloads import update_payload_from_form

detention_blueprint = Blueprint('detentions', __name__)


@detention_blueprint.route('/')
@staff_required
def detention_console():
    status = request.args.get('status')
    if status not in DETENTION_STATUSES:
        status = None

    detentions, stats = load_detention_console(g.identity, status=status)
    return render_template('detentions/console.html',
                           identity=g.identity,
                           detentions=detentions,
                           stats=stats,
                           statuses=DETENTION_STATUSES,
                           status_filter=status)


@detention_blueprint.route('/<detention_pk>')
@staff_required
def detention_detail(detention_pk):
    detention = get_detention(detention_pk)
    if detention is None:
        abort(404)
    return render_template('detentions/detail.html',
                           identity=g.identity,
                           detention=detention,
                           updates=all_detention_updates(detention),
                           statuses=DETENTION_STATUSES)


@detention_blueprint.route('/<detention_pk>/updates', methods=['POST'])
@staff_required
def add_detention_update(detention_pk):
    detention = get_detention(detention_pk)
    if detention is None:
        abort(404)

    data, errors = validate_detention_update(update_payload_from_form(request.form))
    if errors:
        for message in errors.values():
            flash(message, 'danger')
        return redirect(url_for('detentions.detention_detail', detention_pk=detention.id))

    previous_status = detention.status
    record_detention_update(detention, g.identity.id, data['note'],
                            status=data['status'], is_internal=data['is_internal'])
    log_request_activity(g.identity.id, 'detention_update', details={
        'detention_id': detention.detention_id,
        'from_status': previous_status,
        'to_status': detention.status,
    })
    flash('Detention updated.', 'success')
    return redirect(url_for('detentions.detention_detail', detention_pk=detention.id))
