"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str, allow_zero: bool = False) -> Decimal:
    """Parse a positive amount string into a Decimal.

    Direction is carried by the income/expense type, so signs are rejected.
    Handles "123.45", "$123.45", "1,234.56" and "R 99".

    Args:
        amount_str: Amount string
        allow_zero: Accept 0 (used for balances and tolerances)

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[$€£¥R\s]", "", str(amount_str)).replace(",", "")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValueError(f"Amount must be positive, got '{amount_str}'")
    return amount
