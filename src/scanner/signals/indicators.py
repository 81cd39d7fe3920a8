"""Pure indicator math over candle closes and volumes.

Every function degrades to a neutral default instead of raising when the
input is too short, mirroring the fallbacks the calculator applies when a
fetch fails:

    percent change -> 0, RSI -> 50, volume ratio -> 1 (via avg 0 -> 1),
    volatility -> 10, compression -> False

CRITICAL: All computations use Decimal. Never use float for indicator values.
"""

from decimal import ROUND_HALF_UP, Decimal

DEFAULT_PERCENT_CHANGE = Decimal("0")
DEFAULT_RSI = Decimal("50")
DEFAULT_VOLUME_RATIO = Decimal("1")
DEFAULT_VOLATILITY = Decimal("10")

_HUNDRED = Decimal("100")


def compute_percent_change(closes: list[Decimal]) -> Decimal:
    """Percent change between the last two closes.

    Formula: (close[-1] - close[-2]) / close[-2] * 100

    Returns 0 when fewer than two closes are given or the earlier close is 0.
    """
    if len(closes) < 2:
        return DEFAULT_PERCENT_CHANGE
    previous = closes[-2]
    if previous == 0:
        return DEFAULT_PERCENT_CHANGE
    return (closes[-1] - previous) / previous * _HUNDRED


def compute_rsi(closes: list[Decimal], period: int = 14) -> Decimal:
    """Relative Strength Index using simple averages over the last ``period`` deltas.

    Steps:
        delta_i = close_i - close_{i-1}
        avg_gain = mean(max(delta, 0)), avg_loss = mean(max(-delta, 0))
        RSI = round(100 - 100 / (1 + avg_gain / avg_loss))

    With no losses the RSI is 100 if there were gains and 50 for a flat
    series. Fewer than ``period + 1`` closes returns exactly 50.

    Args:
        closes: Closing prices, oldest first.
        period: Number of deltas to average.

    Returns:
        Whole-number RSI in [0, 100].
    """
    if period <= 0 or len(closes) < period + 1:
        return DEFAULT_RSI

    window = closes[-(period + 1):]
    deltas = [window[i] - window[i - 1] for i in range(1, len(window))]
    avg_gain = sum((d for d in deltas if d > 0), Decimal("0")) / period
    avg_loss = sum((-d for d in deltas if d < 0), Decimal("0")) / period

    if avg_loss == 0:
        return _HUNDRED if avg_gain > 0 else DEFAULT_RSI

    rs = avg_gain / avg_loss
    rsi = _HUNDRED - _HUNDRED / (1 + rs)
    rsi = rsi.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return min(max(rsi, Decimal("0")), _HUNDRED)


def average_volume(volumes: list[Decimal]) -> Decimal:
    """Mean of the given volumes, 0 for an empty list."""
    if not volumes:
        return Decimal("0")
    return sum(volumes, Decimal("0")) / len(volumes)


def compute_volume_ratio(current_volume: Decimal, historical_avg: Decimal) -> Decimal:
    """Ratio of current volume to its historical average.

    A zero (or negative) average is replaced by 1 so the ratio is always
    defined. The result is never negative.
    """
    if historical_avg <= 0:
        historical_avg = Decimal("1")
    return max(current_volume / historical_avg, Decimal("0"))


def compute_volatility(closes: list[Decimal]) -> Decimal:
    """Population standard deviation of consecutive percent changes.

    Returns 10 when fewer than two percent changes can be formed.
    """
    changes = [
        (closes[i] - closes[i - 1]) / closes[i - 1] * _HUNDRED
        for i in range(1, len(closes))
        if closes[i - 1] != 0
    ]
    if len(changes) < 2:
        return DEFAULT_VOLATILITY

    mean = sum(changes, Decimal("0")) / len(changes)
    variance = sum(((c - mean) ** 2 for c in changes), Decimal("0")) / len(changes)
    return variance.sqrt()


def is_compressed(std_dev: Decimal, threshold: Decimal = Decimal("0.5")) -> bool:
    """Volatility compression: short-term std dev below the threshold."""
    return std_dev < threshold
