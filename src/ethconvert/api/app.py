"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ethconvert.chain.connection import ConnectionManager
from ethconvert.config import Settings, get_settings
from ethconvert.errors import TransferError
from ethconvert.withdrawal.service import TransferService

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Bind an RPC endpoint before serving, as far as one is reachable."""
    service: TransferService = app.state.transfer_service
    try:
        await service.connections.ensure_connection(require_signer=False)
    except TransferError as e:
        logger.warning(f"Startup connection failed, will retry on first request: {e.message}")
    yield


async def transfer_error_handler(request: Request, exc: TransferError) -> JSONResponse:
    """Render pipeline failures as JSON error bodies."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    settings: Optional[Settings] = None,
    connections: Optional[ConnectionManager] = None,
    service: Optional[TransferService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    if service is None:
        connections = connections or ConnectionManager.from_settings(settings)
        service = TransferService(settings, connections)

    app = FastAPI(
        title="ethconvert API",
        description="Custodial ETH transfer backend",
        version=VERSION,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.transfer_service = service

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TransferError, transfer_error_handler)

    # Register routes
    from ethconvert.api.routes import health, transfers, wallet

    app.include_router(health.router, tags=["Health"])
    app.include_router(wallet.router)
    app.include_router(transfers.router)

    return app
