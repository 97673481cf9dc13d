"""
Render-time formatting for valuation figures.

The valuation core works in plain floats; these helpers only turn them into
display text. Missing or non-finite values render as zero.
"""

import math
from typing import Optional, Union

from .config.constants import DISPLAY_CONFIG
from .valuation.base import Action


def _finite(value: Optional[float]) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def format_currency(value: Optional[float], symbol: str = DISPLAY_CONFIG.CURRENCY_SYMBOL,
                    decimals: int = DISPLAY_CONFIG.DECIMAL_PLACES) -> str:
    """Format as currency, e.g. ``-$1,234.50``."""
    amount = _finite(value)
    sign = "-" if round(amount, decimals) < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"


def format_percent(value: Optional[float], decimals: int = DISPLAY_CONFIG.DECIMAL_PLACES) -> str:
    return f"{_finite(value):.{decimals}f}%"


def action_label(action: Union[Action, str]) -> str:
    """Display label for a recommended action."""
    return Action.parse(action).label
