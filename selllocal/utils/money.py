"""Money helpers. Prices are Decimal rupees with two decimal places."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')


def to_money(value) -> Decimal:
    """
    Coerce a number or numeric string to a Decimal quantized to paise.

    Raises:
        ValueError: if the value is not numeric.
    """
    if isinstance(value, Decimal):
        decimal_value = value
    else:
        try:
            decimal_value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f'Invalid amount: {value}')
    if not decimal_value.is_finite():
        raise ValueError(f'Invalid amount: {value}')
    return decimal_value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_json(value):
    """JSON-friendly number for a money value."""
    if value is None:
        return None
    return float(to_money(value))


def format_inr(value) -> str:
    """Two-decimal string, e.g. '1250.00'."""
    return f"{to_money(value):.2f}"
