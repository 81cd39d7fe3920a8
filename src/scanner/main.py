"""Entry point for the explosion scanner API.

Wires settings, logging, the Binance client and the scanner pipeline into
a FastAPI lifespan and serves it with uvicorn's programmatic API.

Component wiring order:
1. AppSettings (configuration)
2. Logging setup
3. BinanceClient (market data, bounded concurrency)
4. ResultCache (owned by the pipeline)
5. ScannerPipeline (indicators, scoring, filtering)
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from scanner.api.app import create_app
from scanner.config import AppSettings
from scanner.exchange.binance_client import BinanceClient
from scanner.logging import get_logger, setup_logging
from scanner.market_data.result_cache import ResultCache
from scanner.pipeline import ScannerPipeline


def build_pipeline(settings: AppSettings) -> ScannerPipeline:
    """Build the client, cache and pipeline from settings."""
    client = BinanceClient(settings.exchange)
    cache = ResultCache(default_ttl=settings.cache.short_ttl)
    return ScannerPipeline(settings=settings, client=client, cache=cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the pipeline on startup and close the exchange session on shutdown."""
    logger = get_logger("scanner.main")
    settings: AppSettings = app.state.settings

    pipeline = build_pipeline(settings)
    app.state.pipeline = pipeline
    logger.info(
        "lifespan_started",
        default_profile=settings.scanner.default_profile,
        top_results=settings.scanner.top_results,
        max_concurrent_requests=settings.exchange.max_concurrent_requests,
    )

    try:
        yield
    finally:
        await pipeline.close()
        logger.info("explosion_scanner_stopped")


async def run() -> None:
    """Load settings, configure logging and serve the API."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    logger = get_logger("scanner.main")

    app = create_app(lifespan=lifespan)
    app.state.settings = settings

    logger.info("starting_api", host=settings.api.host, port=settings.api.port)

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
