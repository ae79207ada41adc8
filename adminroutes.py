# Standard library imports
from datetime import datetime, timedelta

# Core Flask imports
from flask import Blueprint, g, render_template, request

# Authentication and decorators
from decorators import admin_required

# Application imports
from models import User
from services.activity_log import get_user_activity_log
from services.detentions import load_detention_console
from services.ticket_console import load_ticket_console

admin_blueprint = Blueprint('admin', __name__)


@admin_blueprint.route('/')
@admin_required
def admin_dashboard():
    recent_tickets, stats = load_ticket_console(g.identity, limit=5)
    return render_template('admin/dashboard.html',
                           identity=g.identity,
                           recent_tickets=recent_tickets,
                           stats=stats)


@admin_blueprint.route('/tickets')
@admin_required
def admin_tickets():
    """Admin ticket console: every ticket plus the global counts."""
    tickets, stats = load_ticket_console(g.identity)
    return render_template('tickets/console.html',
                           identity=g.identity,
                           tickets=tickets,
                           stats=stats,
                           statuses=(),
                           status_filter=None)


@admin_blueprint.route('/detentions')
@admin_required
def admin_detentions():
    """Admin detention console: every detention plus the per-status counts."""
    detentions, stats = load_detention_console(g.identity)
    return render_template('detentions/console.html',
                           identity=g.identity,
                           detentions=detentions,
                           stats=stats,
                           statuses=(),
                           status_filter=None)


@admin_blueprint.route('/activity')
@admin_required
def activity_log():
    """View user activity log with filtering options."""
    user_id = request.args.get('user_id') or None
    action = request.args.get('action') or None
    days = request.args.get('days', 7, type=int)
    limit = request.args.get('limit', 100, type=int)

    start_date = datetime.utcnow() - timedelta(days=days) if days else None
    logs = get_user_activity_log(user_id=user_id, action=action, start_date=start_date, limit=limit)
    users = User.query.order_by(User.name).all()

    return render_template('admin/activity_log.html',
                           identity=g.identity,
                           logs=logs,
                           users=users,
                           filters={'user_id': user_id, 'action': action, 'days': days, 'limit': limit})
