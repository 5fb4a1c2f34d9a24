"""Health check endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "ethconvert"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    service = request.app.state.transfer_service
    context = service.connections.current
    return {
        "status": "healthy",
        "service": "ethconvert",
        "version": request.app.version,
        "rpc": context.handle.rpc_url if context else None,
        "config": service.settings.get_safe_dict(),
    }
