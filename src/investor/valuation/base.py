"""
Data structures shared by the valuation engine and the watchlist.

``StockInput`` keeps every field exactly as the user typed it; numbers are
only coerced when a valuation is computed, so the raw text survives for
re-editing. ``ValuationResult`` is always derived from a ``StockInput`` and
never stored on its own.
"""

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..config.constants import DEFAULT_INPUT_ROW
from ..exceptions import ValidationError, raise_unknown_field

RawValue = Union[str, int, float, None]

# Persisted (camelCase) names of the input fields
FIELD_ALIASES = {
    'ticker': 'ticker',
    'eps': 'eps',
    'growthPct': 'growth_pct',
    'aaaCurrentYield': 'aaa_current_yield',
    'price': 'price',
    'mosTargetPct': 'mos_target_pct',
}


class Action(str, Enum):
    """Recommended action for a stock at its current price."""
    NONE = "NONE"
    BUY = "BUY"
    WATCH = "WATCH"
    HOLD_AVOID = "HOLD_AVOID"

    @property
    def label(self) -> str:
        return _ACTION_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "Action":
        """Accept a member, its name, or its display label."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text in cls.__members__:
                return cls[text]
            for action, label in _ACTION_LABELS.items():
                if text == label:
                    return action
        raise ValidationError("action", value, f"expected one of {', '.join(cls.__members__)}")


_ACTION_LABELS = {
    Action.NONE: "—",
    Action.BUY: "BUY (meets MOS)",
    Action.WATCH: "WATCH (below IV, not MOS)",
    Action.HOLD_AVOID: "HOLD / AVOID",
}


@dataclass(frozen=True)
class StockInput:
    """One snapshot of the calculator form."""
    ticker: RawValue = ""
    eps: RawValue = None
    growth_pct: RawValue = None
    aaa_current_yield: RawValue = None
    price: RawValue = None
    mos_target_pct: RawValue = None

    @classmethod
    def default(cls) -> "StockInput":
        return cls(
            ticker=DEFAULT_INPUT_ROW.TICKER,
            eps=DEFAULT_INPUT_ROW.EPS,
            growth_pct=DEFAULT_INPUT_ROW.GROWTH_PCT,
            aaa_current_yield=DEFAULT_INPUT_ROW.AAA_CURRENT_YIELD,
            price=DEFAULT_INPUT_ROW.PRICE,
            mos_target_pct=DEFAULT_INPUT_ROW.MOS_TARGET_PCT,
        )

    @staticmethod
    def field_name(name: str) -> str:
        """Resolve a snake_case or camelCase field name."""
        if name in FIELD_ALIASES:
            return FIELD_ALIASES[name]
        if name in FIELD_ALIASES.values():
            return name
        raise_unknown_field(name)

    def with_field(self, name: str, raw: RawValue) -> "StockInput":
        """Return a copy with one field replaced by its raw entered value."""
        return replace(self, **{self.field_name(name): raw})

    def to_dict(self) -> Dict[str, RawValue]:
        return asdict(self)

    def to_record(self) -> Dict[str, RawValue]:
        """Fields keyed by their persisted names."""
        return {alias: getattr(self, name) for alias, name in FIELD_ALIASES.items()}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "StockInput":
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in record.items():
            name = FIELD_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class ValuationResult:
    """
    Derived valuation metrics for one StockInput.

    ``intrinsic_value`` is None when the formula has no finite answer (a
    zero bond yield); ``acceptable_buy_price`` and ``diff_pct`` follow it.
    """
    intrinsic_value: Optional[float]
    acceptable_buy_price: Optional[float]
    diff_pct: Optional[float]
    action: Action

    def is_computable(self) -> bool:
        return self.intrinsic_value is not None

    def rounded(self, decimals: int = 2) -> "ValuationResult":
        """Copy with numeric values rounded for storage."""
        return ValuationResult(
            intrinsic_value=_round_or_none(self.intrinsic_value, decimals),
            acceptable_buy_price=_round_or_none(self.acceptable_buy_price, decimals),
            diff_pct=_round_or_none(self.diff_pct, decimals),
            action=self.action,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'intrinsic_value': self.intrinsic_value,
            'acceptable_buy_price': self.acceptable_buy_price,
            'diff_pct': self.diff_pct,
            'action': self.action.value,
        }


def _round_or_none(value: Optional[float], decimals: int) -> Optional[float]:
    return None if value is None else round(value, decimals)
