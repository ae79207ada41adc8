from flask import abort, current_app, jsonify

from services.identity import resolve_identity

from . import api_blueprint


@api_blueprint.route('/debug/session')
def debug_session():
    """What the identity provider resolves for this request. Debug mode only."""
    if not current_app.debug:
        abort(404)

    identity = resolve_identity()
    return jsonify({
        'success': True,
        'hasSession': identity is not None,
        'session': {'user': identity.to_dict()} if identity else None,
    })
