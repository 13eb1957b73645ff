"""Shared utility functions for form input coercion and validation.

coerce_amount:       free-text amount → number, 0 on anything unparsable
is_blank:            "required field" check used by workflow guards
is_valid_email:      syntax-only email check (no DNS lookups)
"""
import math

from email_validator import EmailNotValidError, validate_email


def coerce_amount(value, integer=False):
    """Coerce free-text user input to a number.

    Empty, non-numeric, NaN or infinite input becomes ``0`` so that an
    "amount > 0" guard fails instead of raising. Commas are accepted as
    decimal separators ("12,50").

    With ``integer=True`` the value is truncated towards zero.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    if integer:
        return int(number)
    return int(number) if number.is_integer() else number


def is_blank(value):
    """True for None and for strings that are empty once stripped."""
    if value is None:
        return True
    return not str(value).strip()


def is_valid_email(value):
    """Syntax-only email validation (deliverability is not checked)."""
    if is_blank(value):
        return False
    try:
        validate_email(str(value).strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True

