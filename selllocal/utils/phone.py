"""Phone number helpers for Indian mobile numbers."""
import re

_NON_DIGIT = re.compile(r'\D')


def digits_only(phone):
    """Strip everything except digits."""
    if not phone:
        return ''
    return _NON_DIGIT.sub('', str(phone))


def normalize_indian_phone(raw):
    """
    Normalize a phone number to the fixed +91 form.

    Accepts numbers with or without '+', spaces or hyphens and keeps the
    last 10 digits as the local number.

    Raises:
        ValueError: If the input is empty or has fewer than 10 digits.
    """
    if not raw:
        raise ValueError('Phone number is required')

    digits = digits_only(raw)
    if len(digits) < 10:
        raise ValueError('Phone number must have at least 10 digits')

    return f"+91{digits[-10:]}"
