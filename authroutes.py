# Core Flask imports
from flask import Blueprint, current_app, flash, g, redirect, render_template, request, url_for
from flask_login import current_user, login_user, logout_user

# Werkzeug utilities
from werkzeug.security import check_password_hash

# Database and model imports
from models import User

# Authentication and decorators
from decorators import staff_required

# Application imports
from services.activity_log import log_request_activity

auth_blueprint = Blueprint('auth', __name__)

# Dashboard tiles. IT tickets and detentions are live; the rest are placeholders.
DASHBOARD_TOOLS = [
    {'name': 'IT Tickets', 'endpoint': 'tickets.ticket_console', 'available': True},
    {'name': 'Tardy Tracking', 'endpoint': None, 'available': False},
    {'name': 'Hall Passes', 'endpoint': None, 'available': False},
    {'name': 'Detentions', 'endpoint': 'detentions.detention_console', 'available': True},
    {'name': 'Student Locator', 'endpoint': None, 'available': False},
    {'name': 'Lost Device', 'endpoint': None, 'available': False},
]


def _safe_next(target):
    """Only follow local, path-only redirects."""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


@auth_blueprint.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('auth.dashboard'))

    if request.method == 'POST':
        p_number = (request.form.get('p_number') or '').strip()
        password = request.form.get('password') or ''

        if not p_number or not password:
            flash('P number and password are required.', 'danger')
            return render_template('shared/login.html'), 400

        user = User.query.filter_by(p_number=p_number).first()
        if user and user.password_hash and check_password_hash(user.password_hash, password):
            remember = bool(request.form.get('remember'))
            login_user(user, remember=remember)
            log_request_activity(user.id, 'login', details={'role': user.role, 'remember': remember})
            current_app.logger.info(f"User {user.p_number} logged in")
            flash('Logged in successfully.', 'success')
            return redirect(_safe_next(request.args.get('next')) or url_for('auth.dashboard'))

        log_request_activity(
            None,
            'login_failed',
            details={'p_number': p_number, 'reason': 'invalid_credentials'},
            success=False,
            error_message='Invalid credentials',
        )
        current_app.logger.warning(f"Failed login attempt for P number {p_number}")
        flash('Invalid P number or password.', 'danger')
        return render_template('shared/login.html'), 401

    return render_template('shared/login.html')


@auth_blueprint.route('/logout')
@staff_required
def logout():
    log_request_activity(g.identity.id, 'logout', details={'role': g.identity.role})
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('auth.login'))


@auth_blueprint.route('/dashboard')
@staff_required
def dashboard():
    """Default landing page for every signed-in staff member."""
    return render_template('staff/dashboard.html', identity=g.identity, tools=DASHBOARD_TOOLS)
