"""Replay Buffer and Historical Loaders.

Holds the time-ordered event stream a backtest loop pulls from, together
with the per-symbol indexes strategies read between pulls.
"""
from replay.backtest.events import DataEvent, MarketEvent, TickEvent
from replay.backtest.data import (
    DataHandler,
    DataLoader,
    DataStreamer,
    EventBuffer,
    Reseter,
)
from replay.backtest.feed import (
    DataLoadError,
    HistoricalCSVData,
    HistoricalDataFrameData,
)

__all__ = [
    "DataEvent",
    "MarketEvent",
    "TickEvent",
    "DataHandler",
    "DataLoader",
    "DataStreamer",
    "EventBuffer",
    "Reseter",
    "DataLoadError",
    "HistoricalCSVData",
    "HistoricalDataFrameData",
]
