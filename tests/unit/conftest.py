import pandas as pd
import pytest

from factories import bar


@pytest.fixture
def scenario_events():
    # Unsorted on purpose: two symbols share t=10
    return [bar(10, "A", 101.0), bar(10, "B", 50.0), bar(5, "A", 100.0)]


@pytest.fixture
def mixed_events():
    return [
        bar(3, "MSFT"),
        bar(1, "AAPL"),
        bar(2, "MSFT"),
        bar(1, "SPY"),
        bar(2, "AAPL"),
        bar(3, "AAPL"),
        bar(1, "MSFT"),
    ]


@pytest.fixture
def ohlcv_frame():
    dates = pd.date_range(start="2023-01-01", periods=5, freq="D")
    return pd.DataFrame(
        {
            "open": [100, 101, 102, 103, 104],
            "high": [102, 103, 104, 105, 106],
            "low": [99, 100, 101, 102, 103],
            "close": [101, 102, 103, 104, 105],
            "volume": [1000, 1000, 1000, 1000, 1000],
        },
        index=dates,
    )
