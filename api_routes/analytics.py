from flask import jsonify

from decorators import staff_required
from services.ticket_analytics import build_ticket_analytics
from services.tickets import list_tickets

from . import api_blueprint


@api_blueprint.route('/analytics/tickets')
@staff_required
def ticket_analytics():
    """IT dashboard analytics. Like the statistics snapshot, covers all tickets."""
    return jsonify({'success': True, 'analytics': build_ticket_analytics(list_tickets())})
