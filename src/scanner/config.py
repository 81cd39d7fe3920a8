"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

#: High-cap majors excluded from every ranking (they never "explode").
POPULAR_SYMBOLS: frozenset[str] = frozenset(
    {
        "BTCUSDT", "ETHUSDT", "BNBUSDT", "ADAUSDT", "XRPUSDT",
        "SOLUSDT", "DOGEUSDT", "MATICUSDT", "TRXUSDT", "DOTUSDT",
        "LTCUSDT", "AVAXUSDT", "SHIBUSDT", "LINKUSDT", "ATOMUSDT",
        "BCHUSDT", "XLMUSDT", "ETCUSDT", "FILUSDT", "APTUSDT",
    }
)


class ExchangeSettings(BaseSettings):
    """Binance market-data connection settings."""

    model_config = SettingsConfigDict(env_prefix="BINANCE_")

    api_key: SecretStr = SecretStr("")
    request_timeout: float = 8.0  # seconds, per outbound call
    max_concurrent_requests: int = 10  # ceiling on in-flight upstream calls


class CacheSettings(BaseSettings):
    """TTLs (seconds) for the in-process result cache."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    short_ttl: float = 120.0  # ranked candidate lists
    long_ttl: float = 1800.0  # exchange info / new listings
    snapshot_ttl: float = 60.0  # raw 24h ticker snapshot


class IndicatorSettings(BaseSettings):
    """Indicator lookbacks and intervals.

    All fields configurable via INDICATOR_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="INDICATOR_")

    rsi_period: int = 14
    rsi_interval: str = "5m"
    volume_lookback_days: int = 7
    volatility_window: int = 20  # number of candles
    volatility_interval: str = "5m"
    compression_threshold: Decimal = Decimal("0.5")  # std dev of % changes


class ScannerSettings(BaseSettings):
    """Universe selection and result sizing.

    Controls which pairs are considered at all (quote asset, denylist),
    how many survive the snapshot pre-screen, and how many are returned.
    """

    model_config = SettingsConfigDict(env_prefix="SCANNER_")

    quote_asset: str = "USDT"
    excluded_symbols: frozenset[str] = POPULAR_SYMBOLS
    top_results: int = 5
    max_candidates: int = 50  # eligible symbols fanned out per run
    min_volume_regular: Decimal = Decimal("50000")  # base volume, top gainers
    new_listing_days: int = 30
    default_profile: str = "explosion"
    alert_profile: str = "pre_explosion"


class ApiSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    exchange: ExchangeSettings = ExchangeSettings()
    cache: CacheSettings = CacheSettings()
    indicators: IndicatorSettings = IndicatorSettings()
    scanner: ScannerSettings = ScannerSettings()
    api: ApiSettings = ApiSettings()
