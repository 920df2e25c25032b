"""FastAPI application factory.

Lifespan
--------
On startup the app connects the graph store (fatal when unreachable), the
cache store (degrades to no caching when unreachable) and the chain engine
client, and keeps them on ``request.app.state``.  Collaborators passed to
:func:`create_app` are used as-is and left open on shutdown.

Routers
-------
    /api/farm          Farm list and paginated scan history
    /api/marketplace   Farm plot listings and purchases
    /api/portfolio     Per-user holdings
    /api/wallet        Balances, owned NFTs, wallet creation
    /api/auth          Wallet login (nonce, signed redemption)

Errors
------
Service exceptions map to ``{"error": ..., "code": ...}`` bodies.  Internal
details are printed, never returned.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agrihub.api.routers import auth as auth_router
from agrihub.api.routers import farm as farm_router
from agrihub.api.routers import marketplace as marketplace_router
from agrihub.api.routers import portfolio as portfolio_router
from agrihub.api.routers import wallet as wallet_router
from agrihub.auth import IdentityVerifier, NonceStore
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.db.connection import GraphStore
from agrihub.errors import AuthError, NotFoundError, QueryError, ValidationError


# ---------------------------------------------------------------------------
# Error responses
# ---------------------------------------------------------------------------

def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
    print(f"[API] ✗ {request.method} {request.url.path}: auth failed: {exc}")
    return _error(401, "Authentication failed", "AUTH_ERROR")


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    print(f"[API] ✗ {request.method} {request.url.path}: invalid input: {exc}")
    return _error(400, "Invalid input provided", "VALIDATION_ERROR")


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, str(exc), "NOT_FOUND")


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    print(f"[API] ✗ {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return _error(500, "Internal server error", "INTERNAL_ERROR")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_app(
    graph: Optional[GraphStore] = None,
    cache: Optional[CacheStore] = None,
    engine: Optional[ChainEngine] = None,
    verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = []
        state = app.state
        if graph is None:
            state.graph = GraphStore.connect()
            owned.append(state.graph)
        else:
            state.graph = graph
        if cache is None:
            state.cache = CacheStore.connect()
            owned.append(state.cache)
        else:
            state.cache = cache
        if engine is None:
            state.engine = ChainEngine()
            owned.append(state.engine)
        else:
            state.engine = engine
        state.verifier = verifier if verifier is not None else IdentityVerifier(state.graph)
        state.nonces = NonceStore()
        try:
            yield
        finally:
            for resource in owned:
                resource.close()

    app = FastAPI(
        title="Agrihub API",
        description=(
            "Read-mostly aggregation API for the farm monitoring mobile client: "
            "farm scan history, marketplace listings, portfolio and wallet views."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthError, _auth_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(QueryError, _internal_error)
    app.add_exception_handler(Exception, _internal_error)

    app.include_router(farm_router.router, prefix="/api/farm", tags=["farm"])
    app.include_router(marketplace_router.router, prefix="/api/marketplace", tags=["marketplace"])
    app.include_router(portfolio_router.router, prefix="/api/portfolio", tags=["portfolio"])
    app.include_router(wallet_router.router, prefix="/api/wallet", tags=["wallet"])
    app.include_router(auth_router.router, prefix="/api/auth", tags=["auth"])

    @app.get("/health", tags=["health"])
    def health(request: Request) -> dict[str, object]:
        return {"status": "ok", "cache": request.app.state.cache.available}

    return app


# Module-level instance used by uvicorn:
#   uvicorn agrihub.api.app:app --port 9085
app = create_app()
