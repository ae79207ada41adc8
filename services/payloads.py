"""
Checks shared by the JSON and form handlers that write tickets and detentions.
"""

MIN_NOTE_LENGTH = 5


def clean(value):
    """Strip a submitted value; blank or missing becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def not_an_object():
    return {'body': 'Expected a JSON object.'}


def validate_update(payload, statuses):
    """
    Validate a status update: a note of at least MIN_NOTE_LENGTH characters,
    an optional status from `statuses` and an optional boolean isInternal.

    Returns (data, errors).
    """
    if not isinstance(payload, dict):
        return {}, not_an_object()

    errors = {}
    note = clean(payload.get('note'))
    status = clean(payload.get('status'))
    is_internal = payload.get('isInternal', False)

    if not note or len(note) < MIN_NOTE_LENGTH:
        errors['note'] = f'Note must be at least {MIN_NOTE_LENGTH} characters.'
    if status and status not in statuses:
        errors['status'] = f"Status must be one of: {', '.join(statuses)}."
    if is_internal is None:
        is_internal = False
    elif not isinstance(is_internal, bool):
        errors['isInternal'] = 'isInternal must be true or false.'

    return {'note': note, 'status': status, 'is_internal': is_internal is True}, errors


def update_payload_from_form(form):
    """The update form's fields in the shape validate_update expects."""
    return {
        'note': form.get('note'),
        'status': form.get('status'),
        'isInternal': 'isInternal' in form,
    }
