"""Human-readable numbers for reservations, work orders and orders."""

from django.utils import timezone
from django.utils.crypto import get_random_string

SUFFIX_CHARS = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_document_number(prefix: str, *, model, field: str, attempts: int = 10) -> str:
    """
    Build ``<PREFIX>-YYYYMMDD-XXXX`` unique for ``model.field``.

    Example:
        >>> generate_document_number('RES', model=Reservation, field='reservation_number')
        'RES-20250110-K7QD'
    """
    today = timezone.localdate().strftime('%Y%m%d')
    for _ in range(attempts):
        number = f"{prefix}-{today}-{get_random_string(4, allowed_chars=SUFFIX_CHARS)}"
        if not model.objects.filter(**{field: number}).exists():
            return number
    # Fall back to a longer suffix on a crowded day
    return f"{prefix}-{today}-{get_random_string(8, allowed_chars=SUFFIX_CHARS)}"
