from flask import current_app, g, jsonify, request

from decorators import staff_required
from models import DETENTION_STATUSES
from services.activity_log import log_request_activity
from services.detentions import (
    all_detention_updates,
    create_detention,
    find_detention_by_reference,
    get_detention,
    load_detention_console,
    public_detention_updates,
    record_detention_update,
    validate_detention_submission,
    validate_detention_update,
)

from . import api_blueprint, expected_json_object, json_object, validation_error


def _not_found():
    return jsonify({'success': False, 'error': 'Detention not found'}), 404


@api_blueprint.route('/detentions', methods=['POST'])
def report_detention():
    """Public detention report."""
    payload = json_object()
    if payload is None:
        return expected_json_object()

    data, errors = validate_detention_submission(payload)
    if errors:
        return validation_error(errors)

    detention = create_detention(data)
    current_app.logger.info(f"Detention {detention.detention_id} reported by {detention.reporting_staff}")
    return jsonify({'success': True, 'detentionId': detention.detention_id, 'id': detention.id}), 201


@api_blueprint.route('/detentions', methods=['GET'])
def get_detentions():
    reference = request.args.get('detentionId')
    if reference:
        return _lookup_by_reference(reference)
    return _list_detentions()


def _lookup_by_reference(reference):
    detention = find_detention_by_reference(reference)
    if detention is None:
        return _not_found()

    body = detention.to_dict()
    body['updates'] = [update.to_dict() for update in public_detention_updates(detention)]
    return jsonify({'success': True, 'detention': body})


@staff_required
def _list_detentions():
    status = request.args.get('status')
    if status and status not in DETENTION_STATUSES:
        return validation_error({'status': f"Status must be one of: {', '.join(DETENTION_STATUSES)}."})

    detentions, stats = load_detention_console(
        g.identity,
        status=status,
        limit=current_app.config['DETENTION_LIST_LIMIT'],
    )
    return jsonify({
        'success': True,
        'detentions': [detention.to_dict() for detention in detentions],
        'stats': stats.to_dict(),
    })


@api_blueprint.route('/detentions/<detention_pk>', methods=['GET'])
@staff_required
def get_detention_detail(detention_pk):
    detention = get_detention(detention_pk)
    if detention is None:
        return _not_found()

    body = detention.to_dict()
    body['updates'] = [update.to_dict() for update in all_detention_updates(detention)]
    return jsonify({'success': True, 'detention': body})


@api_blueprint.route('/detentions/<detention_pk>', methods=['PATCH'])
@staff_required
def update_detention(detention_pk):
    payload = json_object()
    if payload is None:
        return expected_json_object()

    data, errors = validate_detention_update(payload)
    if errors:
        return validation_error(errors)

    detention = get_detention(detention_pk)
    if detention is None:
        return _not_found()

    previous_status = detention.status
    record_detention_update(detention, g.identity.id, data['note'],
                            status=data['status'], is_internal=data['is_internal'])
    log_request_activity(g.identity.id, 'detention_update', details={
        'detention_id': detention.detention_id,
        'from_status': previous_status,
        'to_status': detention.status,
    })
    return jsonify({'success': True})
