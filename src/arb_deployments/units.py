"""Token amount formatting for arb-deployments library."""

from decimal import Context, Decimal

# Enough precision for any uint256 amount
_UINT256_CONTEXT = Context(prec=78)


def format_units(value: int, decimals: int = 18) -> str:
    """
    Render an integer token amount in whole units.

    Args:
        value: Amount in the token's smallest unit
        decimals: Token decimals

    Returns:
        Plain decimal string without exponent or trailing zeros,
        e.g. format_units(1500000, 6) == "1.5"
    """
    amount = Decimal(value).scaleb(-decimals, context=_UINT256_CONTEXT)
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_ether(value: int) -> str:
    """Render a wei amount in native units."""
    return format_units(value, 18)
