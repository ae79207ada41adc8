"""
Error handling for the staff portal.

Authorization failures never reach the page: they become redirects (or JSON
401/403 for API calls). Failed data reads are shown to the user, since they
are signed in and allowed to see the data.
"""

import logging
from functools import wraps

from flask import flash, jsonify, redirect, render_template, request, url_for
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, NotFound

from errors import Forbidden, QueryFailure, Unauthenticated
from extensions import db

logger = logging.getLogger(__name__)


def wants_json():
    return request.path.startswith('/api/')


def _json_error(message, status_code):
    return jsonify({'success': False, 'error': message}), status_code


def _error_page(error_code, error_message):
    return render_template('shared/error.html',
                           error_code=error_code,
                           error_message=error_message), error_code


def handle_unauthenticated(error):
    """Send the visitor to the login page."""
    if wants_json():
        return _json_error('Unauthorized', 401)
    flash(error.description, 'warning')
    if request.method == 'GET':
        next_url = request.full_path if request.query_string else request.path
        return redirect(url_for('auth.login', next=next_url))
    return redirect(url_for('auth.login'))


def handle_forbidden(error):
    """Signed in, wrong tier: back to the staff dashboard, not the login page."""
    if wants_json():
        return _json_error('Forbidden', 403)
    flash(error.description, 'danger')
    return redirect(url_for('auth.dashboard'))


def handle_query_failure(error):
    db.session.rollback()
    logger.error(f"Query failure on {request.method} {request.path}: {error.__cause__ or error}")
    if wants_json():
        return _json_error(error.description, 500)
    return _error_page(500, error.description)


def handle_not_found(error):
    if wants_json():
        return _json_error('Not found', 404)
    return _error_page(404, "The page you're looking for doesn't exist.")


def handle_csrf_error(error):
    flash('Invalid request. Please try again.', 'danger')
    return redirect(url_for('auth.login'))


def handle_unexpected_error(error):
    """Log anything unhandled and show the generic error page."""
    if isinstance(error, HTTPException):
        return error
    db.session.rollback()
    logger.exception(f"Unexpected error on {request.method} {request.path}: {error}")
    if wants_json():
        return _json_error('Internal server error', 500)
    return _error_page(500, 'An unexpected error occurred. Please try again later.')


def register_error_handlers(app):
    app.register_error_handler(Unauthenticated, handle_unauthenticated)
    app.register_error_handler(Forbidden, handle_forbidden)
    app.register_error_handler(QueryFailure, handle_query_failure)
    app.register_error_handler(NotFound, handle_not_found)
    app.register_error_handler(CSRFError, handle_csrf_error)
    app.register_error_handler(Exception, handle_unexpected_error)


def query_failure_on_error(description=None):
    """
    Decorator for data reads: a SQLAlchemy error is logged and re-raised as
    QueryFailure, so the reader sees the error page instead of the generic 500.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Read {func.__name__} failed: {e}", exc_info=True)
                raise QueryFailure(description) from e
        return wrapper
    return decorator
