"""Price bar container and converters from common tabular/JSON shapes."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd


@dataclass(frozen=True)
class PriceBar:
    """One observed market sample.

    Attributes:
        date: Chronological date/time label (e.g. '2024-01-31')
        price: Close price, must be > 0
        open: Open price (defaults to price)
        high: High price (defaults to price)
        low: Low price (defaults to price)
        volume: Traded volume (defaults to 0)
    """
    date: str
    price: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: float = 0.0

    def __post_init__(self):
        """Validate price and fill optional OHLC fields."""
        if not self.price > 0:
            raise ValueError(f"price ({self.price}) must be positive")
        # frozen dataclass: defaults are written through object.__setattr__
        for name in ("open", "high", "low"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, float(self.price))
        if self.volume is None:
            object.__setattr__(self, "volume", 0.0)


def prices_of(bars: Sequence[PriceBar]) -> pd.Series:
    """Close prices as a float Series with a positional index."""
    return pd.Series([bar.price for bar in bars], dtype=float, name="price")


def volumes_of(bars: Sequence[PriceBar]) -> pd.Series:
    """Volumes as a float Series with a positional index."""
    return pd.Series([bar.volume for bar in bars], dtype=float, name="volume")


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _usable_price(value: Any) -> Optional[float]:
    """Parsed close, or None when it is blank, non-finite or not positive."""
    price = _optional_float(value)
    if price is None or not math.isfinite(price) or price <= 0:
        return None
    return price


def _bar_from_record(date: Any, price: float, record: Mapping[str, Any]) -> PriceBar:
    volume = _optional_float(record.get("volume"))
    return PriceBar(
        date=str(date),
        price=price,
        open=_optional_float(record.get("open")),
        high=_optional_float(record.get("high")),
        low=_optional_float(record.get("low")),
        volume=volume if volume is not None else 0.0,
    )


def bars_from_frame(df: pd.DataFrame) -> List[PriceBar]:
    """
    Convert a DataFrame of daily rows into PriceBars.

    Args:
        df: Rows in chronological order with a 'date' column (or a date index)
            and a 'close' or 'price' column. 'open', 'high', 'low' and
            'volume' are optional.

    Returns:
        List of PriceBar. Rows whose close is blank, non-finite or <= 0 are skipped.

    Raises:
        ValueError: If no price column is present.
    """
    frame = df.copy()
    if "date" not in frame.columns:
        frame = frame.reset_index()
        frame = frame.rename(columns={frame.columns[0]: "date"})

    price_col = "close" if "close" in frame.columns else "price"
    if price_col not in frame.columns:
        raise ValueError(f"Expected a 'close' or 'price' column, got {frame.columns.tolist()}")

    bars = []
    for row in frame.to_dict("records"):
        price = _usable_price(row[price_col])
        if price is None:
            continue
        date = row["date"]
        if isinstance(date, pd.Timestamp):
            date = date.strftime("%Y-%m-%d")
        bars.append(_bar_from_record(date, price, row))
    return bars


def bars_from_time_series(payload: Mapping[str, Any]) -> List[PriceBar]:
    """
    Parse a time-series JSON payload into chronological PriceBars.

    The payload carries a 'values' list of string-valued records
    (datetime/open/high/low/close/volume), newest first. Records whose
    close is blank, non-finite or <= 0 are skipped.

    Raises:
        ValueError: If the payload reports an error or has no values.
    """
    if payload.get("status") == "error":
        raise ValueError(payload.get("message") or "Time series payload reported an error")

    values = payload.get("values")
    if not isinstance(values, list):
        raise ValueError("Time series payload has no 'values' list")

    bars = []
    for item in reversed(values):
        price = _usable_price(item.get("close"))
        if price is not None:
            bars.append(_bar_from_record(item["datetime"], price, item))
    return bars
