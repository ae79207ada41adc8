"""
IT dashboard analytics over the whole ticket set.
"""

import re

from models import TICKET_STATUSES, URGENCY_LEVELS

TARGET_BUILDINGS = ('5', '8', '9', '17', '20', '21')
OTHER_BUILDING = 'Other'
TOP_SUBMITTER_COUNT = 10

# Two-digit buildings first so '17xx' is not read as building 1
_TWO_DIGIT_BUILDING = re.compile(r'^(17|20|21)')
_ONE_DIGIT_BUILDING = re.compile(r'^([589])')


def extract_building(room_number):
    """Building number encoded at the start of a room number, or None."""
    if not room_number:
        return None
    match = _TWO_DIGIT_BUILDING.match(room_number) or _ONE_DIGIT_BUILDING.match(room_number)
    return match.group(1) if match else None


def build_ticket_analytics(tickets):
    building_counts = {building: 0 for building in TARGET_BUILDINGS}
    building_counts[OTHER_BUILDING] = 0
    urgency_counts = {urgency: 0 for urgency in URGENCY_LEVELS}
    status_counts = {status: 0 for status in TICKET_STATUSES}
    submitter_counts = {}

    for ticket in tickets:
        building = extract_building(ticket.room_number)
        building_counts[building if building in building_counts else OTHER_BUILDING] += 1

        submitter = ticket.requester_name or ticket.p_number or 'Unknown'
        submitter_counts[submitter] = submitter_counts.get(submitter, 0) + 1

        urgency = (ticket.urgency or 'medium').lower()
        urgency_counts[urgency if urgency in urgency_counts else 'medium'] += 1

        status = (ticket.status or 'submitted').lower()
        status_counts[status if status in status_counts else 'submitted'] += 1

    top_submitters = sorted(
        ({'name': name, 'count': count} for name, count in submitter_counts.items()),
        key=lambda entry: entry['count'],
        reverse=True,
    )[:TOP_SUBMITTER_COUNT]

    # updated_at stands in for the resolution time
    finished = [t for t in tickets if t.status in ('resolved', 'closed')]
    avg_resolution_hours = 0
    if finished:
        total_hours = sum(
            (t.updated_at - t.created_at).total_seconds() / 3600 for t in finished
        )
        avg_resolution_hours = round(total_hours / len(finished))

    return {
        'buildingCounts': building_counts,
        'topSubmitters': top_submitters,
        'urgencyCounts': urgency_counts,
        'statusCounts': status_counts,
        'totalTickets': len(tickets),
        'avgResolutionHours': avg_resolution_hours,
        'resolvedCount': len(finished),
    }
