#!/usr/bin/env python3
"""
Main entry point for the shortlink service.

Concurrency: The server handles multiple connections simultaneously via async I/O
(FastAPI + asyncpg connection pool). Set WORKERS > 1 for multi-process scaling
across CPU cores; each worker has its own DB pool, so use REDIS_URL to share rate
limit counters and a PostgreSQL DATABASE_URL (memory:// is per process).

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL, or memory:// for an in-process store
    CREATE_TABLES - Create the urls table on startup (default true)
    REDIS_URL - Redis connection URL for shared rate limiting (optional)
    BASE_URL - Base URL for short links
    ADMIN_KEY - Shared secret for /api/admin endpoints
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlink.database import create_store, URLShortenerPostgres
from shortlink.ratelimit import RedisRateLimiter
from shortlink.service import URLShortenerService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting shortlink service...")

    db = create_store(
        config.database_url,
        pool_max_size=config.db_pool_max_size,
        timeout_seconds=config.db_timeout_seconds,
        logger=logger,
    )
    rate_limiter = None
    try:
        if isinstance(db, URLShortenerPostgres) and config.create_tables:
            await db.ensure_schema()

        if config.redis_url:
            logger.info(f"Connecting to Redis at {config.redis_url}")
            rate_limiter = RedisRateLimiter(
                config.redis_url,
                max_requests=config.rate_limit_requests,
                window_seconds=config.rate_limit_window_seconds,
                logger=logger,
            )
            await rate_limiter.connect()
        else:
            logger.info("Rate limit counters kept in process memory")
    except Exception:
        logger.error("Startup failed, releasing connections")
        if rate_limiter is not None:
            await rate_limiter.close()
        await db.close()
        raise

    if rate_limiter is not None:
        app.state.rate_limiter = rate_limiter

    generator = ShortCodeGenerator(default_length=config.short_code_length)
    service = URLShortenerService(
        db=db,
        short_code_generator=generator,
        logger=logger,
        max_collision_retries=config.max_collision_retries,
        blocked_hosts=config.blocked_hosts,
    )

    app.state.db = db
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down shortlink service...")

    await service.close()
    await app.state.rate_limiter.close()

    logger.info("Service stopped")


def build_app(config=None) -> FastAPI:
    """Build the service app; store and service are attached in lifespan.

    Also the factory each worker process imports when WORKERS > 1.
    """
    config = config or load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    app = create_app(
        db_instance=None,
        service_instance=None,
        config=config,
    )

    app.state.logger = logger
    app.router.lifespan_context = lifespan
    return app


def main():
    """Main entry point."""
    config = load_config()
    app = build_app(config)
    logger = app.state.logger

    logger.info("Shortlink Service")
    logger.info(f"Configuration: {config.safe_dump()}")
    if config.uses_default_admin_key:
        logger.warning("ADMIN_KEY is not set; admin endpoints use the default key")

    if config.workers > 1:
        if config.database_url.startswith("memory://"):
            logger.warning("memory:// store is per process; workers will not share records")
        logger.info(f"Starting {config.workers} workers on {config.host}:{config.port}")
        # uvicorn's supervisor handles SIGINT/SIGTERM for its workers
        uvicorn.run(
            "app:build_app",
            factory=True,
            host=config.host,
            port=config.port,
            workers=config.workers,
            log_level=config.log_level.lower(),
        )
        return

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
