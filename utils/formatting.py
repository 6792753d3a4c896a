"""
Formatting utilities.
"""

from typing import Optional


def format_currency(amount: Optional[float], currency: str = "KES") -> str:
    """
    Format an amount as currency.

    Args:
        amount: The amount in whole units. None renders as a dash.
        currency: Currency code (default KES).

    Returns:
        Formatted currency string.
    """
    if amount is None:
        return "-"
    symbols = {
        "USD": "$",
    }
    symbol = symbols.get(currency, currency + " ")
    return f"{symbol}{amount:,.0f}"


def format_percent(value: float, decimals: int = 0) -> str:
    """Format a number as a percentage."""
    return f"{value:.{decimals}f}%"
