"""
JSON API.

Ticket and detention submission and reference lookup are public; everything
else sits behind the staff gate and answers 401/403 as JSON instead of
redirecting.
"""

from flask import Blueprint, jsonify, request

api_blueprint = Blueprint('api', __name__)


def json_object():
    """The request body when it is a JSON object, else None."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


def expected_json_object():
    return jsonify({'success': False, 'error': 'Expected a JSON object'}), 400


def validation_error(errors):
    return jsonify({'success': False, 'error': 'Validation error', 'details': errors}), 400


# Import route modules to register their routes on the blueprint
from . import analytics, debug, detentions, tickets  # noqa: E402,F401
