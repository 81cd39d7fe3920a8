"""Shared data models for the explosion scanner.

All prices, volumes, percentages and scores use Decimal, converted from the
upstream's string fields with Decimal(str(raw)). Never use float for them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


@dataclass(frozen=True)
class TickerSnapshot:
    """24h rolling ticker for one trading pair, as fetched."""

    symbol: str
    last_price: Decimal
    price_change_percent_24h: Decimal
    quote_volume_24h: Decimal
    volume_24h: Decimal  # base asset volume
    trade_count: int
    timestamp: int  # close time, Unix milliseconds


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar."""

    open_time: int  # Unix milliseconds
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal


@dataclass
class CandleSeries:
    """Candles for one symbol and interval, ordered oldest -> newest."""

    symbol: str
    interval: str
    candles: list[Candle] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.candles)

    @property
    def closes(self) -> list[Decimal]:
        return [c.close for c in self.candles]

    @property
    def volumes(self) -> list[Decimal]:
        return [c.volume for c in self.candles]


@dataclass(frozen=True)
class ListingInfo:
    """Exchange metadata used to classify new listings."""

    symbol: str
    onboard_date: int | None  # Unix milliseconds, None when unknown


@dataclass
class IndicatorSet:
    """All indicator values computed for one symbol in one pipeline run."""

    symbol: str
    rsi: Decimal  # 0-100
    change_percent: dict[str, Decimal]  # interval -> % change of last bar
    volume_ratio: Decimal  # >= 0
    volatility: Decimal  # std dev of 5m % changes, >= 0
    is_compressed: bool
    is_new_listing: bool = False

    def change(self, interval: str) -> Decimal:
        """Percent change for an interval, 0 when it was not computed."""
        return self.change_percent.get(interval, Decimal("0"))


@dataclass
class CompositeScore:
    """Composite explosion score with its per-factor breakdown."""

    symbol: str
    score: Decimal  # whole points, may exceed 100
    profile: str
    factors: dict[str, Decimal] = field(default_factory=dict)


class RecommendationAction(str, Enum):
    """Action label derived from the composite score."""

    EXPLOSION_IMMINENT = "explosion_imminent"
    STRONG_BUY = "strong_buy"
    MONITOR = "monitor"
    AVOID = "avoid"


@dataclass
class Recommendation:
    """Suggested entry, target and stop for a candidate."""

    action: RecommendationAction
    buy_price: Decimal
    sell_target: Decimal
    stop_loss: Decimal
    confidence: str


@dataclass
class Candidate:
    """A scored symbol, the unit returned to callers and cached."""

    symbol: str
    price: Decimal
    indicators: IndicatorSet
    score: CompositeScore
    recommendation: Recommendation
    price_change_percent_24h: Decimal = Decimal("0")
    quote_volume_24h: Decimal = Decimal("0")
