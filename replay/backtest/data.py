"""
Replay buffer: the ordered event stream a backtest loop pulls from.

The buffer splits its events into two phases:
- pending: not yet handed out, in consumption order
- history: already handed out, in the order ``next()`` returned them

Every ``next()`` moves exactly one event from pending to history and updates
the per-symbol indexes (latest event, full list) in the same call, so a read
straight after ``next()`` always reflects the event just returned.

Exhaustion and unknown symbols are routine outcomes and are reported with
sentinels (``(None, False)``, ``None``, ``()``), never with exceptions.

Not thread-safe. One loop owns one buffer.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from opentelemetry import trace

from replay.backtest.events import Timestamped


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class DataLoader(ABC):
    """Populates the event stream from some source."""

    @abstractmethod
    def load(self, symbols: Optional[Sequence[str]] = None) -> None:
        pass


class DataStreamer(ABC):
    """Pull-one-at-a-time access plus the read-only views."""

    @abstractmethod
    def next(self) -> Tuple[Optional[Timestamped], bool]:
        pass

    @abstractmethod
    def stream(self) -> Tuple[Timestamped, ...]:
        pass

    @abstractmethod
    def history(self) -> Tuple[Timestamped, ...]:
        pass

    @abstractmethod
    def latest(self, symbol: str) -> Optional[Timestamped]:
        pass

    @abstractmethod
    def list(self, symbol: str) -> Tuple[Timestamped, ...]:
        pass


class Reseter(ABC):
    @abstractmethod
    def reset(self) -> None:
        pass


class DataHandler(DataLoader, DataStreamer, Reseter):
    """Combined interface a backtest loop depends on."""


def _sort_key(event: Timestamped):
    # symbol breaks timestamp ties so replay order is reproducible
    return (event.timestamp, event.symbol)


class EventBuffer(DataHandler):
    """
    In-memory replay buffer.

    Example:
        buffer = EventBuffer()
        buffer.set_pending(events)
        buffer.sort_pending()
        for event in buffer:
            strategy.on_event(event, buffer.latest(event.symbol))
    """

    def __init__(self, events: Optional[Iterable[Timestamped]] = None):
        self._stream: Deque[Timestamped] = deque(events or ())
        self._history: List[Timestamped] = []
        self._latest: Dict[str, Timestamped] = {}
        self._list: Dict[str, List[Timestamped]] = {}

    def load(self, symbols: Optional[Sequence[str]] = None) -> None:
        """
        No-op on the bare buffer.

        Loaders (see ``replay.backtest.feed``) override this to build events
        and hand them to ``set_pending``.
        """
        logger.debug("EventBuffer.load called without a loader, nothing to do")

    def set_pending(self, events: Iterable[Timestamped]) -> None:
        """Replace the pending stream. No ordering is applied."""
        self._stream = deque(events)

    def sort_pending(self) -> None:
        """Order pending by timestamp, then symbol."""
        with tracer.start_as_current_span("sort_pending") as span:
            span.set_attribute("replay.pending", len(self._stream))
            self._stream = deque(sorted(self._stream, key=_sort_key))
        logger.debug(f"Sorted {len(self._stream)} pending events")

    def next(self) -> Tuple[Optional[Timestamped], bool]:
        """
        Hand out the first pending event.

        Returns:
            (event, True) on success, (None, False) once the stream is
            exhausted. Exhaustion leaves every view untouched.
        """
        if not self._stream:
            return None, False

        event = self._stream.popleft()
        self._history.append(event)

        self._update_latest(event)
        self._update_list(event)

        return event, True

    def stream(self) -> Tuple[Timestamped, ...]:
        return tuple(self._stream)

    def history(self) -> Tuple[Timestamped, ...]:
        return tuple(self._history)

    def latest(self, symbol: str) -> Optional[Timestamped]:
        """Most recently consumed event for ``symbol``, or None if unseen."""
        return self._latest.get(symbol)

    def list(self, symbol: str) -> Tuple[Timestamped, ...]:
        """All consumed events for ``symbol`` in consumption order."""
        return tuple(self._list.get(symbol, ()))

    def reset(self) -> None:
        """
        Rewind to the start of the stream.

        Pending after reset is history followed by whatever was still
        pending, so a partly consumed run also restarts from its first event.
        History and both indexes are cleared. Calling it twice in a row is
        the same as calling it once.
        """
        replayed = len(self._history)
        self._stream = deque(self._history + list(self._stream))
        self._history = []
        self._latest = {}
        self._list = {}
        logger.debug(f"Reset buffer, {replayed} events queued for replay")

    def __iter__(self) -> Iterator[Timestamped]:
        while True:
            event, ok = self.next()
            if not ok:
                return
            yield event

    def __len__(self) -> int:
        return len(self._stream)

    def _update_latest(self, event: Timestamped) -> None:
        self._latest[event.symbol] = event

    def _update_list(self, event: Timestamped) -> None:
        self._list.setdefault(event.symbol, []).append(event)
