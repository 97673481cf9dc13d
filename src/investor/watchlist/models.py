"""
Persisted watchlist record.

A ``WatchlistEntry`` is a StockInput flattened together with a frozen copy of
its ValuationResult at save time. Records are stored with the camelCase keys
of the browser app's localStorage format so an exported watchlist loads unchanged.
"""

import json
from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as RecordValidationError

from ..config.constants import WATCHLIST_DEFAULTS
from ..exceptions import ValidationError
from ..valuation.base import Action, StockInput, ValuationResult

RawValue = Union[str, int, float, None]


class WatchlistEntry(BaseModel):
    """One saved valuation snapshot."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Inputs, as entered
    ticker: str = ""
    eps: RawValue = None
    growth_pct: RawValue = Field(default=None, alias="growthPct")
    aaa_current_yield: RawValue = Field(default=None, alias="aaaCurrentYield")
    price: RawValue = None
    mos_target_pct: RawValue = Field(default=None, alias="mosTargetPct")

    # Valuation frozen at save time (None when not computable)
    intrinsic_value: Optional[float] = Field(default=None, alias="intrinsicValue")
    acceptable_buy_price: Optional[float] = Field(default=None, alias="acceptableBuyPrice")
    diff_pct: Optional[float] = Field(default=None, alias="diffPct")
    action: Action = Action.NONE

    # Creation time in epoch milliseconds
    ts: int

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, value):
        try:
            return Action.parse(value)
        except ValidationError as e:
            raise ValueError(str(e)) from e

    @field_validator("eps", "growth_pct", "aaa_current_yield", "price", "mos_target_pct", mode="before")
    @classmethod
    def _no_booleans(cls, value):
        # Booleans value as missing input; store them that way
        return None if isinstance(value, bool) else value

    @field_validator("ticker", mode="before")
    @classmethod
    def _ticker_text(cls, value):
        return "" if value is None else str(value)

    @classmethod
    def from_valuation(
        cls,
        stock: StockInput,
        result: ValuationResult,
        ts: int,
        decimals: int = WATCHLIST_DEFAULTS.ROUND_DECIMALS,
    ) -> "WatchlistEntry":
        frozen = result.rounded(decimals)
        return cls(
            ticker=stock.ticker,
            eps=stock.eps,
            growth_pct=stock.growth_pct,
            aaa_current_yield=stock.aaa_current_yield,
            price=stock.price,
            mos_target_pct=stock.mos_target_pct,
            intrinsic_value=frozen.intrinsic_value,
            acceptable_buy_price=frozen.acceptable_buy_price,
            diff_pct=frozen.diff_pct,
            action=frozen.action,
            ts=ts,
        )

    @property
    def stock_input(self) -> StockInput:
        """The editable input fields, without the frozen valuation."""
        return StockInput(
            ticker=self.ticker,
            eps=self.eps,
            growth_pct=self.growth_pct,
            aaa_current_yield=self.aaa_current_yield,
            price=self.price,
            mos_target_pct=self.mos_target_pct,
        )

    @property
    def result(self) -> ValuationResult:
        return ValuationResult(
            intrinsic_value=self.intrinsic_value,
            acceptable_buy_price=self.acceptable_buy_price,
            diff_pct=self.diff_pct,
            action=self.action,
        )


_ENTRY_LIST = TypeAdapter(List[WatchlistEntry])


def encode_entries(entries: List[WatchlistEntry]) -> str:
    """Serialize a watchlist to a JSON array."""
    return _ENTRY_LIST.dump_json(entries, by_alias=True).decode("utf-8")


def decode_entries(
    payload: str,
    on_invalid: Optional[Callable[[int, Any, RecordValidationError], None]] = None,
) -> List[WatchlistEntry]:
    """
    Parse a JSON array of watchlist records.

    Records that fail validation are skipped so the rest of the watchlist
    survives; ``on_invalid(position, record, error)`` is called for each.

    Raises
    ------
    ValueError
        If ``payload`` is not JSON or not a JSON array
    """
    records = json.loads(payload)
    if not isinstance(records, list):
        raise ValueError(f"Expected a JSON array of watchlist records, got {type(records).__name__}")

    entries = []
    for position, record in enumerate(records):
        try:
            entries.append(WatchlistEntry.model_validate(record))
        except RecordValidationError as e:
            if on_invalid is not None:
                on_invalid(position, record, e)
    return entries
