"""Custom exceptions for the explosion scanner.

Kept in one module so the exchange, signal and pipeline layers can share
them without circular imports.
"""


class ScannerError(Exception):
    """Base exception for all scanner errors."""


class UpstreamUnavailable(ScannerError):
    """Raised when the market-data API fails, times out, or returns garbage."""


class InsufficientData(ScannerError):
    """Raised when fewer candles are available than an indicator requires."""

    def __init__(self, symbol: str, required: int, available: int) -> None:
        super().__init__(
            f"{symbol}: need {required} candles, upstream returned {available}"
        )
        self.symbol = symbol
        self.required = required
        self.available = available


class InvalidSymbol(ScannerError):
    """Raised when a requested symbol is not traded on the exchange."""


class UnknownProfile(ScannerError):
    """Raised when a scoring profile name is not registered."""
