"""Replay buffer for event-driven backtests."""

__version__ = "0.3.0"
