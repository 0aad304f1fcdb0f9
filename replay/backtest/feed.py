"""
Historical loaders for the replay buffer.

Each loader is an EventBuffer whose ``load(symbols)`` turns OHLCV tables into
MarketEvents, replaces the pending stream with them and (by default) sorts it
by timestamp then symbol.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd
from opentelemetry import trace

from replay.backtest.data import EventBuffer
from replay.backtest.events import MarketEvent
from replay.core.config import settings


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PRICE_COLUMNS = ["open", "high", "low", "close"]


class DataLoadError(Exception):
    """Raised when historical data cannot be turned into events."""


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """'Adj Close' -> 'adj_close', 'Open' -> 'open'."""
    df = df.copy()
    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    return df


def frame_to_events(symbol: str, df: pd.DataFrame) -> List[MarketEvent]:
    """
    Convert one symbol's bars into MarketEvents.

    df: DataFrame(index=datetime, columns=['open','high','low','close'[,'adj_close'][,'volume']])
    Rows with a missing date or price are dropped.
    """
    df = _normalize_columns(df)

    missing = [c for c in PRICE_COLUMNS if c not in df.columns]
    if missing:
        raise DataLoadError(f"{symbol}: missing columns {missing}")

    try:
        df.index = pd.to_datetime(df.index)
    except (ValueError, TypeError) as e:
        raise DataLoadError(f"{symbol}: index is not a datetime index") from e

    undated = df.index.isna()
    if undated.any():
        logger.warning(f"{symbol}: dropped {int(undated.sum())} rows with missing dates")
        df = df[~undated]

    clean = df.dropna(subset=PRICE_COLUMNS)
    dropped = len(df) - len(clean)
    if dropped:
        logger.warning(f"{symbol}: dropped {dropped} rows with missing prices")

    has_adj = "adj_close" in clean.columns
    has_volume = "volume" in clean.columns
    events = []
    for index, row in clean.iterrows():
        adj_close = row["adj_close"] if has_adj else None
        volume = row["volume"] if has_volume else 0.0
        events.append(
            MarketEvent(
                timestamp=index.to_pydatetime(),
                symbol=symbol,
                open=float(row["open"]),
                high=float(row["high"]),
                low=float(row["low"]),
                close=float(row["close"]),
                adj_close=None if pd.isna(adj_close) else float(adj_close),
                volume=0.0 if pd.isna(volume) else float(volume),
            )
        )
    return events


class HistoricalDataFrameData(EventBuffer):
    """
    Replays bars held in memory, one DataFrame per symbol.
    """

    def __init__(self, data_dict: Dict[str, pd.DataFrame], sort: Optional[bool] = None):
        """
        data_dict: { 'AAPL': pd.DataFrame(index=datetime, columns=['open','high','low','close','volume']) }
        """
        super().__init__()
        self.data = data_dict
        self.symbol_list = list(data_dict.keys())
        self.sort = settings.SORT_ON_LOAD if sort is None else sort

    def load(self, symbols: Optional[Sequence[str]] = None) -> None:
        """Load ``symbols`` (all held symbols when empty) into the pending stream."""
        symbols = list(dict.fromkeys(symbols)) if symbols else self.symbol_list

        with tracer.start_as_current_span("load_data") as span:
            span.set_attribute("replay.symbols", symbols)
            events: List[MarketEvent] = []
            for symbol in symbols:
                if symbol not in self.data:
                    raise DataLoadError(f"No data held for {symbol}")
                bars = frame_to_events(symbol, self.data[symbol])
                logger.info(f"Loaded {len(bars)} bars for {symbol}")
                events.extend(bars)

            span.set_attribute("replay.events", len(events))
            self.set_pending(events)
            if self.sort:
                self.sort_pending()


class HistoricalCSVData(HistoricalDataFrameData):
    """
    Replays bars from ``<data_dir>/<SYMBOL>.csv`` files.

    Expected header: Date,Open,High,Low,Close[,Adj Close][,Volume]
    (any case).
    """

    def __init__(self, data_dir: Optional[str] = None, sort: Optional[bool] = None):
        self.data_dir = Path(data_dir or settings.DATA_DIR)
        super().__init__({}, sort=sort)

    def available_symbols(self) -> List[str]:
        if not self.data_dir.is_dir():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.csv"))

    def load(self, symbols: Optional[Sequence[str]] = None) -> None:
        """Read the CSV file of every symbol, then replay them together."""
        symbols = list(dict.fromkeys(symbols)) if symbols else self.available_symbols()
        if not symbols:
            raise DataLoadError(f"No CSV files found in {self.data_dir}")

        frames = {symbol: self._read_csv(symbol) for symbol in symbols}
        previous = self.data
        self.data = frames
        try:
            super().load(symbols)
        except Exception:
            self.data = previous
            raise
        self.symbol_list = symbols

    def _read_csv(self, symbol: str) -> pd.DataFrame:
        path = self.data_dir / f"{symbol}.csv"
        try:
            df = pd.read_csv(path)
        except FileNotFoundError as e:
            raise DataLoadError(f"No data file for {symbol}: {path}") from e
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DataLoadError(f"Could not parse {path}") from e

        df = _normalize_columns(df)
        if "date" not in df.columns:
            raise DataLoadError(f"{symbol}: missing 'date' column in {path}")

        try:
            df.index = pd.to_datetime(df.pop("date"))
        except (ValueError, TypeError) as e:
            raise DataLoadError(f"{symbol}: unparseable dates in {path}") from e
        return df
