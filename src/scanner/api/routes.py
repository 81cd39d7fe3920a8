"""JSON API endpoints over the scanner pipeline."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from scanner.logging import bind_request_context
from scanner.models import Candidate, ListingInfo, TickerSnapshot
from scanner.pipeline import ScannerPipeline

router = APIRouter()

API_VERSION = "3.0.0"


def _to_json(obj: Any) -> Any:
    """Recursively convert dataclasses, Decimals and enums for JSON serialization."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _to_json(dataclasses.asdict(obj))
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _to_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_json(item) for item in obj]
    return obj


def _candidate_payload(candidate: Candidate) -> dict:
    indicators = candidate.indicators
    return {
        "symbol": candidate.symbol,
        "price": str(candidate.price),
        "priceChangePercent": str(candidate.price_change_percent_24h),
        "volume24h": str(candidate.quote_volume_24h),
        "explosionScore": str(candidate.score.score),
        "profile": candidate.score.profile,
        "factors": _to_json(candidate.score.factors),
        "technicals": {
            "rsi": str(indicators.rsi),
            "changePercent": _to_json(indicators.change_percent),
            "volumeRatio": str(indicators.volume_ratio),
            "volatility": str(indicators.volatility),
            "isCompressed": indicators.is_compressed,
            "isNewListing": indicators.is_new_listing,
        },
        "recommendation": _to_json(candidate.recommendation),
    }


def _ticker_payload(ticker: TickerSnapshot) -> dict:
    return {
        "symbol": ticker.symbol,
        "price": str(ticker.last_price),
        "priceChangePercent": str(ticker.price_change_percent_24h),
    }


def _listing_payload(listing: ListingInfo) -> dict:
    return {"symbol": listing.symbol, "onboardDate": listing.onboard_date}


def _pipeline(request: Request) -> ScannerPipeline:
    return request.app.state.pipeline


def _envelope(data: Any) -> JSONResponse:
    return JSONResponse(
        content={
            "success": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }
    )


@router.get("/explosion-candidates")
async def get_explosion_candidates(
    request: Request, profile: str | None = None
) -> JSONResponse:
    """Ranked explosion candidates for a profile (default: explosion)."""
    bind_request_context(endpoint="explosion-candidates", profile=profile)
    candidates = await _pipeline(request).run(profile)
    return _envelope([_candidate_payload(c) for c in candidates])


@router.get("/alerts")
async def get_alerts(request: Request) -> JSONResponse:
    """Ranked pre-explosion alerts."""
    bind_request_context(endpoint="alerts")
    candidates = await _pipeline(request).alerts()
    return _envelope([_candidate_payload(c) for c in candidates])


@router.get("/analysis/{symbol}")
async def get_analysis(
    request: Request, symbol: str, profile: str | None = None
) -> JSONResponse:
    """Score one symbol; 404 if it is not traded."""
    bind_request_context(endpoint="analysis", symbol=symbol.upper())
    candidate = await _pipeline(request).analyze_one(symbol, profile)
    return _envelope(_candidate_payload(candidate))


@router.get("/top-gainers")
async def get_top_gainers(request: Request) -> JSONResponse:
    """Largest 24h gainers, no indicator computation."""
    bind_request_context(endpoint="top-gainers")
    gainers = await _pipeline(request).top_gainers()
    return _envelope([_ticker_payload(t) for t in gainers])


@router.get("/new-listings")
async def get_new_listings(request: Request) -> JSONResponse:
    """Most recently onboarded pairs."""
    bind_request_context(endpoint="new-listings")
    listings = await _pipeline(request).new_listings()
    return _envelope([_listing_payload(item) for item in listings])


@router.get("/health")
async def get_health() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "ok",
            "version": API_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
