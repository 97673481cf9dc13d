"""
Graham intrinsic value calculator.

Implements the revised Benjamin Graham formula

    IV = EPS x (8.5 + 2g) x (4.4 / Y)

where g is the expected growth rate in percent and Y the current AAA
corporate bond yield in percent. The growth rate is read as a percentage,
converted to a decimal and multiplied back by 100 inside the formula, so the
result matches the classic formulation exactly.

Every function is pure: raw form values go in, plain floats come out, and
unparseable input falls back to a documented default instead of failing.
"""

import math
from typing import Any, NamedTuple, Optional

from ..config.constants import VALUATION_DEFAULTS
from ..config.logging_config import get_logger, log_valuation_result
from .base import Action, StockInput, ValuationResult

logger = get_logger(__name__)


def coerce_number(raw: Any, fallback: float = VALUATION_DEFAULTS.FALLBACK_NUMBER) -> float:
    """
    Parse a raw form value into a finite float.

    Parameters
    ----------
    raw : Any
        Value as entered: a number, numeric text, empty text or None
    fallback : float
        Returned when ``raw`` does not parse to a finite number

    Returns
    -------
    float
        Always finite; this function never raises
    """
    if raw is None or isinstance(raw, bool):
        return fallback

    if isinstance(raw, str):
        raw = raw.strip()
        # float() accepts digit separators ("1_000"); form input does not
        if not raw or "_" in raw:
            return fallback

    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return fallback

    return value if math.isfinite(value) else fallback


def percent_to_decimal(raw: Any) -> float:
    """Parse a percentage (10 means 10%) into a decimal; unparseable input is 0."""
    return coerce_number(raw, 0.0) / 100


class _Inputs(NamedTuple):
    """Numbers read from one StockInput snapshot."""
    eps: float
    growth: float
    aaa_yield: float
    price: float
    mos_target: float


def _read(stock: StockInput) -> _Inputs:
    return _Inputs(
        eps=coerce_number(stock.eps, VALUATION_DEFAULTS.FALLBACK_NUMBER),
        growth=percent_to_decimal(stock.growth_pct),
        aaa_yield=coerce_number(stock.aaa_current_yield, VALUATION_DEFAULTS.FALLBACK_AAA_YIELD),
        price=coerce_number(stock.price, VALUATION_DEFAULTS.FALLBACK_NUMBER),
        mos_target=percent_to_decimal(stock.mos_target_pct),
    )


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def _intrinsic_value(values: _Inputs) -> Optional[float]:
    if values.aaa_yield == 0:
        return None
    multiplier = VALUATION_DEFAULTS.NO_GROWTH_PE + VALUATION_DEFAULTS.GROWTH_MULTIPLIER * (values.growth * 100)
    return _finite_or_none(
        values.eps * multiplier * (VALUATION_DEFAULTS.HISTORICAL_AAA_YIELD / values.aaa_yield)
    )


def _acceptable_buy_price(values: _Inputs, intrinsic: Optional[float]) -> Optional[float]:
    if intrinsic is None:
        return None
    return _finite_or_none(intrinsic * (1 - values.mos_target))


def _diff_pct(values: _Inputs, intrinsic: Optional[float]) -> Optional[float]:
    if values.price <= 0:
        return 0.0
    if intrinsic is None:
        return None
    return _finite_or_none(((intrinsic - values.price) / values.price) * 100)


def _action(values: _Inputs, intrinsic: Optional[float], buy_price: Optional[float]) -> Action:
    # Negative prices are treated like a missing price
    if values.price <= 0 or intrinsic is None:
        return Action.NONE
    if buy_price is not None and values.price <= buy_price:
        return Action.BUY
    if values.price < intrinsic:
        return Action.WATCH
    return Action.HOLD_AVOID


def intrinsic_value(stock: StockInput) -> Optional[float]:
    """
    Graham intrinsic value per share.

    Returns None when the value is not computable (AAA yield of zero, or a
    product too large to represent).
    """
    return _intrinsic_value(_read(stock))


def acceptable_buy_price(stock: StockInput) -> Optional[float]:
    """Intrinsic value discounted by the margin-of-safety target."""
    values = _read(stock)
    return _acceptable_buy_price(values, _intrinsic_value(values))


def diff_pct(stock: StockInput) -> Optional[float]:
    """Upside (positive) or downside of intrinsic value over price, in percent."""
    values = _read(stock)
    return _diff_pct(values, _intrinsic_value(values))


def recommended_action(stock: StockInput) -> Action:
    values = _read(stock)
    intrinsic = _intrinsic_value(values)
    return _action(values, intrinsic, _acceptable_buy_price(values, intrinsic))


def evaluate(stock: StockInput) -> ValuationResult:
    """
    Compute all valuation metrics from a single read of ``stock``.

    Parameters
    ----------
    stock : StockInput
        Current calculator form values

    Returns
    -------
    ValuationResult
        Intrinsic value, buy price, upside and recommended action
    """
    values = _read(stock)
    intrinsic = _intrinsic_value(values)
    buy_price = _acceptable_buy_price(values, intrinsic)
    result = ValuationResult(
        intrinsic_value=intrinsic,
        acceptable_buy_price=buy_price,
        diff_pct=_diff_pct(values, intrinsic),
        action=_action(values, intrinsic, buy_price),
    )

    log_valuation_result(logger, str(stock.ticker), intrinsic, result.action.value)
    return result
