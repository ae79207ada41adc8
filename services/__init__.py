"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .activity_log import get_user_activity_log, log_activity, log_request_activity
from .detentions import DetentionSnapshot, aggregate_detention_status, load_detention_console
from .identity import Identity, resolve_identity
from .ticket_analytics import build_ticket_analytics, extract_building
from .ticket_console import load_ticket_console
from .ticket_stats import StatisticsSnapshot, aggregate_ticket_status
from .ticket_visibility import UNRESOLVED_ORG_ID, VisibilityScope, resolve_visibility, scope_for

__all__ = [
    'get_user_activity_log',
    'log_activity',
    'log_request_activity',
    'DetentionSnapshot',
    'aggregate_detention_status',
    'load_detention_console',
    'Identity',
    'resolve_identity',
    'build_ticket_analytics',
    'extract_building',
    'load_ticket_console',
    'StatisticsSnapshot',
    'aggregate_ticket_status',
    'UNRESOLVED_ORG_ID',
    'VisibilityScope',
    'resolve_visibility',
    'scope_for',
]
