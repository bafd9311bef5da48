"""FastAPI web server for the rbxprofile aggregator."""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from rbxprofile import __version__
from rbxprofile.config import AggregatorConfig
from rbxprofile.core.exporter import to_dict
from rbxprofile.core.orchestrator import ProfileAggregator
from rbxprofile.exceptions import RateLimitedError, RbxProfileError
from rbxprofile.logging import get_logger
from rbxprofile.models.query import cache_key
from rbxprofile.models.result import CacheStats
from rbxprofile.ratelimit import SlidingWindowLimiter

MAX_TRACKED_CLIENTS = 1024

log = get_logger("api")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    cache_entries: int


class CacheStatsResponse(CacheStats):
    """Cache statistics with the stored keys."""

    keys: list[str] = Field(default_factory=list)
    key_count: int = 0


class CacheClearResponse(BaseModel):
    message: str
    cleared_entries: int


class CacheDeleteResponse(BaseModel):
    message: str
    username: str
    cache_key: str
    deleted: bool


def _aggregator(request: Request) -> ProfileAggregator:
    return request.app.state.aggregator


def _client_id(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_rate_limit(request: Request) -> None:
    """Per-IP sliding window limit for the lookup endpoints."""
    limiter: SlidingWindowLimiter = request.app.state.limiter
    if limiter.tracked_clients > MAX_TRACKED_CLIENTS:
        limiter.prune()
    if not limiter.hit(_client_id(request)):
        raise RateLimitedError(
            "Too many requests, please try again later.",
            retry_after_seconds=max(1, int(limiter.window)),
        )


def create_app(
    config: AggregatorConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        config: AggregatorConfig instance, uses defaults if None
        transport: httpx transport override for the upstream client

    Returns:
        Configured FastAPI app
    """
    config = config or AggregatorConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage aggregator lifecycle."""
        aggregator = ProfileAggregator(config, transport=transport)
        await aggregator.__aenter__()
        app.state.aggregator = aggregator
        app.state.started_at = time.monotonic()
        try:
            yield
        finally:
            await aggregator.__aexit__(None, None, None)

    app = FastAPI(
        title="rbxprofile API",
        description="Consolidated Roblox profile lookups",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.limiter = SlidingWindowLimiter(
        config.rate_limit_window_ms,
        config.rate_limit_max_requests,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RbxProfileError)
    async def handle_profile_error(request: Request, exc: RbxProfileError):
        log.warning(
            "request_failed",
            path=request.url.path,
            kind=exc.kind,
            error=exc.message,
            status_code=exc.status_code,
        )
        headers = None
        if isinstance(exc, RateLimitedError):
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        log.error("unhandled_error", path=request.url.path, error=repr(exc))
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal",
                "message": "Something went wrong on our end",
                "details": None,
                "retry_after_seconds": None,
            },
        )

    @app.get("/", tags=["System"])
    async def root():
        """Describe the service and its endpoints."""
        return {
            "message": "Roblox profile aggregation API is running",
            "endpoints": {
                "/api/roblox/{username}": "GET/POST - Get Roblox user information",
                "/health": "GET - Health check",
                "/cache/stats": "GET - Cache statistics",
                "/cache/clear": "POST - Clear cache",
                "/cache/user/{username}": "DELETE - Clear one user's cache entry",
            },
            "rate_limit": {
                "window_ms": config.rate_limit_window_ms,
                "max_requests": config.rate_limit_max_requests,
            },
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request):
        """Check API health status."""
        stats = await _aggregator(request).cache_stats()
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime_seconds=time.monotonic() - request.app.state.started_at,
            cache_entries=stats.entries,
        )

    @app.api_route(
        "/api/roblox/{username}",
        methods=["GET", "POST"],
        tags=["Profiles"],
        dependencies=[Depends(enforce_rate_limit)],
    )
    async def get_profile(
        request: Request,
        username: str,
        force_refresh: bool = Query(False, description="Skip cache"),
    ):
        """
        Consolidated profile for a Roblox username.

        Identity, details, counts, avatar, username history and presence are
        fetched from the Roblox APIs and merged; results are cached.
        """
        log.info("profile_request", username=username, method=request.method)
        profile = await _aggregator(request).fetch_profile(username, force_refresh=force_refresh)
        return to_dict(profile)

    @app.get("/cache/stats", response_model=CacheStatsResponse, tags=["Cache"])
    async def cache_stats(request: Request):
        """Cache statistics and stored keys."""
        aggregator = _aggregator(request)
        stats = await aggregator.cache_stats()
        keys = await aggregator.cache_keys()
        return CacheStatsResponse(**stats.model_dump(), keys=keys, key_count=len(keys))

    @app.post("/cache/clear", response_model=CacheClearResponse, tags=["Cache"])
    async def cache_clear(request: Request):
        """Clear every cached profile."""
        cleared = await _aggregator(request).clear_cache()
        return CacheClearResponse(message="Cache cleared successfully", cleared_entries=cleared)

    @app.delete("/cache/user/{username}", response_model=CacheDeleteResponse, tags=["Cache"])
    async def cache_delete(request: Request, username: str):
        """Clear one user's cached profile."""
        deleted = await _aggregator(request).invalidate_cache(username)
        return CacheDeleteResponse(
            message="User cache cleared" if deleted else "User not found in cache",
            username=username,
            cache_key=cache_key(username),
            deleted=deleted,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = AggregatorConfig()
    uvicorn.run(app, host=settings.host, port=settings.port)
