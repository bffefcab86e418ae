# workshop_system/numbering.py

from django.conf import settings

from .models import DocumentSequence


def format_sequence_number(prefix, number, padding=None):
    if padding is None:
        padding = settings.WORKSHOP_CONFIG['NUMBER_PADDING']
    return f"{prefix}-{number:0{padding}d}"


def parse_sequence_number(value, prefix):
    """Returns the numeric part of e.g. 'JC-012', or 0 when it does not parse."""
    if not value or not value.startswith(f"{prefix}-"):
        return 0
    try:
        return int(value[len(prefix) + 1:])
    except ValueError:
        return 0


def next_sequence_number(model, field, prefix):
    """
    Allocates the next human readable number for ``model.field``.

    Must be called inside ``transaction.atomic()``. The prefix's counter row
    stays locked until the caller commits, so concurrent creations queue on
    it. Numbers already present in the table (rows created outside this
    function) are never handed out again.
    """
    sequence, _ = DocumentSequence.objects.select_for_update().get_or_create(prefix=prefix)
    last = (
        model.objects
        .filter(**{f"{field}__startswith": f"{prefix}-"})
        .order_by('-id')
        .values_list(field, flat=True)
        .first()
    )
    sequence.last_number = max(sequence.last_number, parse_sequence_number(last, prefix)) + 1
    sequence.save(update_fields=['last_number', 'updated_at'])
    return format_sequence_number(prefix, sequence.last_number)
