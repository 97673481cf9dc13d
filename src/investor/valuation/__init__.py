"""
Valuation Package

Graham intrinsic value, margin-of-safety buy price and recommended action
for a single snapshot of user-entered stock fundamentals.
"""

from .base import Action, StockInput, ValuationResult
from .graham import (
    acceptable_buy_price,
    coerce_number,
    diff_pct,
    evaluate,
    intrinsic_value,
    percent_to_decimal,
    recommended_action,
)

__all__ = [
    'Action',
    'StockInput',
    'ValuationResult',
    'acceptable_buy_price',
    'coerce_number',
    'diff_pct',
    'evaluate',
    'intrinsic_value',
    'percent_to_decimal',
    'recommended_action',
]
