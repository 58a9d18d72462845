"""Forest Client number formatting.

Client numbers are eight digits, zero padded. Callers and the gateway may
send them without the padding.
"""

from wastesearch.core.constants import CLIENT_NUMBER_LENGTH, PLACEHOLDER_CLIENT_NUMBER


def _padded(value: str) -> str | None:
    if not value.isascii() or not value.isdigit():
        return None
    padded = str(int(value)).zfill(CLIENT_NUMBER_LENGTH)
    return padded if len(padded) == CLIENT_NUMBER_LENGTH else None


def normalize_client_number(value: str | None) -> str:
    """Zero-pad a numeric client number to eight digits.

    Empty, non-numeric or too long input gives PLACEHOLDER_CLIENT_NUMBER,
    which matches no client upstream.
    """
    if value is None:
        return PLACEHOLDER_CLIENT_NUMBER
    return _padded(value.strip()) or PLACEHOLDER_CLIENT_NUMBER


def canonical_client_number(value: str) -> str:
    """Padded form of a numeric client number; anything else is returned trimmed."""
    value = value.strip()
    return _padded(value) or value
