"""
Price history sources (local files only; fetching is done elsewhere).
"""
from __future__ import annotations
from typing import Any, List, Optional, Protocol, Sequence

from stockbrain.data.bars import PriceBar, bars_from_frame


class PriceBarSource(Protocol):
    """
    Protocol for anything that hands out chronological price bars.

    Methods:
        symbols() -> List[str]
        load_bars(symbol, start=None, end=None) -> List[PriceBar]
    """
    def symbols(self) -> "List[str]": ...
    def load_bars(self, symbol: str, start: Optional[Any] = None, end: Optional[Any] = None) -> "List[PriceBar]": ...


class CSVBarSource:
    """
    Adapter for daily bars stored as one CSV file per symbol.

    File structure:
        <root>/[SYMBOL].csv
        - Columns: date, close (or price), optional open/high/low/volume
        - Example: data/prices/AAPL.csv

    Notes:
        - Rows may be in any order; they are sorted by date on load.
    """
    def __init__(self, root_path: str = "data/prices"):
        """
        Initialize with root path to CSV files.

        Args:
            root_path: Directory containing [SYMBOL].csv files
        """
        from pathlib import Path
        self.root_path = Path(root_path)
        if not self.root_path.exists():
            raise ValueError(f"Root path does not exist: {root_path}")

    def symbols(self) -> "List[str]":
        """
        Return available symbols from CSV files.

        Returns:
            Sorted list of symbol names (e.g., ['AAPL', 'GOOGL'])
        """
        return sorted(path.stem for path in self.root_path.glob("*.csv"))

    def load_bars(self, symbol: str, start: Optional[Any] = None, end: Optional[Any] = None) -> "List[PriceBar]":
        """
        Load bars for one symbol, optionally restricted to a date range.

        Args:
            symbol: Symbol to load (e.g., 'AAPL')
            start: Start date (optional, 'YYYY-MM-DD' or datetime)
            end: End date (optional, 'YYYY-MM-DD' or datetime)

        Returns:
            Chronological list of PriceBar.

        Raises:
            FileNotFoundError: If the symbol CSV file is missing
            ValueError: If no rows with a usable close fall inside the date range
        """
        import pandas as pd

        csv_path = self.root_path / f"{symbol}.csv"
        if not csv_path.exists():
            raise FileNotFoundError(f"Symbol not found: {symbol} at {csv_path}")

        df = pd.read_csv(csv_path)
        df.columns = [str(c).strip().lower() for c in df.columns]
        if "date" not in df.columns and "datetime" in df.columns:
            df = df.rename(columns={"datetime": "date"})

        stamps = pd.to_datetime(df["date"])
        df = df.assign(_ts=stamps).sort_values("_ts", kind="stable")

        if start is not None:
            df = df[df["_ts"] >= pd.Timestamp(start)]
        if end is not None:
            df = df[df["_ts"] <= pd.Timestamp(end)]

        if len(df) == 0:
            raise ValueError(f"No data in date range: {start} to {end}")

        df = df.assign(date=df["date"].astype(str)).drop(columns="_ts")
        bars = bars_from_frame(df.reset_index(drop=True))
        if not bars:
            raise ValueError(f"No usable prices for {symbol} in {csv_path}")
        return bars
