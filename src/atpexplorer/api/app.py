"""FastAPI application exposing the registry over HTTP.

Every request reads ``store.snapshot`` exactly once and answers from that
snapshot, so a reload landing mid-request never mixes two load cycles.

Routes
------
- ``GET /health``                                   liveness + identity count
- ``GET /health/checks``                            snapshot and refresh-loop checks
- ``GET /v1``                                       protocol info
- ``GET /v1/identities``                            paged listing
- ``GET /v1/identities/{fingerprint}``              full or short fingerprint
- ``GET /v1/lookup/name/{name}``                    exact name
- ``GET /v1/lookup/platform/{platform}/{handle}``   platform handle
- ``GET /v1/lookup/wallet/{address}``               wallet address
- ``GET /v1/search?q=``                             substring search
- ``GET /v1/stats``                                 aggregate counts
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from atpexplorer import __version__
from atpexplorer.health.check import HealthCheck, HealthStatus
from atpexplorer.registry.snapshot import NotFound, PlatformUnknown
from atpexplorer.registry.store import RegistryStore
from atpexplorer.schema.errors import InvalidQueryError
from atpexplorer.schema.identity import DEFAULT_ATP_VERSION, Identity

logger = logging.getLogger(__name__)

PROTOCOL_NAME: str = "Agent Trust Protocol"
PROTOCOL_SHORT_NAME: str = "ATP"
PROTOCOL_SPEC_URL: str = "https://github.com/ShrikeBot/agent-trust-protocol"


def _lookup_response(result: Identity | NotFound | PlatformUnknown) -> JSONResponse:
    """Map a point-lookup result to a 200 or 404 response."""
    if isinstance(result, Identity):
        return JSONResponse(result.to_dict())
    return JSONResponse(result.to_dict(), status_code=404)


def create_app(store: RegistryStore, manage_refresh: bool = True) -> FastAPI:
    """Build the explorer API around *store*.

    Parameters
    ----------
    store:
        Snapshot holder queried by every route.
    manage_refresh:
        Start the store (initial load plus refresh thread) when the app
        starts and stop it on shutdown.  Disable when the caller manages the
        store's lifecycle itself.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if manage_refresh:
            store.start()
            logger.info(
                "Serving %d identities from %s",
                len(store.snapshot),
                store.documents_dir,
            )
        try:
            yield
        finally:
            if manage_refresh:
                store.stop()

    app = FastAPI(
        title="ATP Explorer API",
        description="Decentralized agent discovery via the Agent Trust Protocol.",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=store.config.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    health_check = HealthCheck()
    health_check.register_snapshot_check(store)
    health_check.register_refresh_check(store)
    app.state.store = store
    app.state.health = health_check

    # ------------------------------------------------------------------
    # Service info
    # ------------------------------------------------------------------

    @app.get("/health", summary="Liveness and identity count")
    def health() -> dict:
        return {
            "status": "ok",
            "protocol": PROTOCOL_SHORT_NAME,
            "version": DEFAULT_ATP_VERSION,
            "identityCount": len(store.snapshot),
        }

    # 503 only when a check could not run; DEGRADED still serves.
    @app.get("/health/checks", summary="Registry and refresh-loop health checks")
    def health_checks() -> JSONResponse:
        report = health_check.run_checks()
        status_code = 503 if report.status is HealthStatus.UNHEALTHY else 200
        return JSONResponse(report.to_dict(), status_code=status_code)

    @app.get("/v1", summary="Protocol info")
    def protocol_info() -> dict:
        return {
            "protocol": PROTOCOL_NAME,
            "version": DEFAULT_ATP_VERSION,
            "spec": PROTOCOL_SPEC_URL,
            "endpoints": {
                "identities": "/v1/identities",
                "lookup": {
                    "byFingerprint": "/v1/identities/:fingerprint",
                    "byName": "/v1/lookup/name/:name",
                    "byPlatform": "/v1/lookup/platform/:platform/:handle",
                    "byWallet": "/v1/lookup/wallet/:address",
                },
                "search": "/v1/search?q=query",
                "stats": "/v1/stats",
            },
        }

    # ------------------------------------------------------------------
    # Listing and lookups
    # ------------------------------------------------------------------

    # limit/offset stay strings so malformed values fall back to defaults
    @app.get("/v1/identities", summary="List identities")
    def list_identities(
        limit: Optional[str] = Query(default=None),
        offset: Optional[str] = Query(default=None),
    ) -> dict:
        return store.snapshot.list_identities(limit=limit, offset=offset).to_dict()

    @app.get("/v1/identities/{fingerprint}", summary="Get identity by fingerprint")
    def get_by_fingerprint(fingerprint: str) -> JSONResponse:
        return _lookup_response(store.snapshot.get_by_fingerprint(fingerprint))

    @app.get("/v1/lookup/name/{name}", summary="Look up identity by name")
    def get_by_name(name: str) -> JSONResponse:
        return _lookup_response(store.snapshot.get_by_name(name))

    @app.get(
        "/v1/lookup/platform/{platform}/{handle}",
        summary="Look up identity by platform handle",
    )
    def get_by_platform(platform: str, handle: str) -> JSONResponse:
        return _lookup_response(store.snapshot.get_by_platform(platform, handle))

    @app.get("/v1/lookup/wallet/{address}", summary="Look up identity by wallet address")
    def get_by_wallet(address: str) -> JSONResponse:
        return _lookup_response(store.snapshot.get_by_wallet(address))

    # ------------------------------------------------------------------
    # Search and stats
    # ------------------------------------------------------------------

    @app.get("/v1/search", summary="Search identities")
    def search(
        q: Optional[str] = Query(default=None),
        limit: Optional[str] = Query(default=None),
    ) -> JSONResponse:
        try:
            result = store.snapshot.search(q, limit=limit)
        except InvalidQueryError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        return JSONResponse(result.to_dict())

    @app.get("/v1/stats", summary="Registry statistics")
    def stats() -> dict:
        return store.snapshot.stats().to_dict()

    return app
