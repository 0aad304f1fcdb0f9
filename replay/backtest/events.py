from datetime import datetime
from typing import Literal, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


@runtime_checkable
class Timestamped(Protocol):
    """Anything the replay buffer can order and index."""

    timestamp: datetime
    symbol: str


class DataEvent(BaseModel):
    """
    Base data point flowing through the replay buffer.

    Frozen: the buffer reorders and indexes events but never edits them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = "DATA"
    timestamp: datetime = Field(..., description="Event Timestamp")
    symbol: str = Field(..., description="Ticker Symbol")

    @property
    def price(self) -> Optional[float]:
        return None


class MarketEvent(DataEvent):
    """
    OHLCV bar.
    """

    type: Literal["MARKET"] = "MARKET"
    open: float = Field(..., description="Open Price")
    high: float = Field(..., description="High Price")
    low: float = Field(..., description="Low Price")
    close: float = Field(..., description="Close Price")
    adj_close: Optional[float] = Field(
        default=None, description="Split/Dividend Adjusted Close"
    )
    volume: float = Field(default=0.0, description="Traded Volume")

    @property
    def price(self) -> float:
        """Adjusted close if the source provides one, otherwise close."""
        if self.adj_close is not None:
            return self.adj_close
        return self.close


class TickEvent(DataEvent):
    """
    Top-of-book quote.
    """

    type: Literal["TICK"] = "TICK"
    bid: float = Field(..., description="Best Bid")
    ask: float = Field(..., description="Best Ask")
    bid_size: float = Field(default=0.0, description="Size at Best Bid")
    ask_size: float = Field(default=0.0, description="Size at Best Ask")

    @property
    def price(self) -> float:
        return (self.bid + self.ask) / 2

    @property
    def spread(self) -> float:
        return self.ask - self.bid
