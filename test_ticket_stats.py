from sqlalchemy import event

from extensions import db
from services.ticket_stats import StatisticsSnapshot, aggregate_ticket_status


def test_empty_ticket_table_gives_zero_counts(app):
    stats = aggregate_ticket_status()
    assert stats == StatisticsSnapshot(total=0, open=0, resolved=0, closed=0)
    assert stats.to_dict() == {'total': 0, 'open': 0, 'resolved': 0, 'closed': 0}


def test_counts_by_status(seeded_tickets):
    stats = aggregate_ticket_status()
    assert stats.total == 5
    assert stats.open == 3  # submitted x2 + in_progress
    assert stats.resolved == 1
    assert stats.closed == 1


def test_counts_always_add_up(make_ticket):
    statuses = ['submitted', 'in_progress', 'resolved', 'closed', 'closed', 'resolved', 'submitted']
    for i, status in enumerate(statuses):
        make_ticket(f'P{i % 3}', status)
        stats = aggregate_ticket_status()
        assert stats.open + stats.resolved + stats.closed == stats.total == i + 1


def test_counts_are_plain_non_negative_ints(seeded_tickets):
    stats = aggregate_ticket_status()
    for value in stats.to_dict().values():
        assert type(value) is int
        assert value >= 0


def test_statistics_ignore_the_viewer(seeded_tickets):
    # No scope argument: the snapshot is global by design
    assert aggregate_ticket_status().total == len(seeded_tickets)


def test_counts_come_from_a_single_select(seeded_tickets):
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(db.engine, 'before_cursor_execute', record)
    try:
        stats = aggregate_ticket_status()
    finally:
        event.remove(db.engine, 'before_cursor_execute', record)

    selects = [s for s in statements if s.lstrip().upper().startswith('SELECT')]
    assert len(selects) == 1
    assert stats.total == 5
