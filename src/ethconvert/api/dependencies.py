"""FastAPI dependencies."""

from fastapi import Request

from ethconvert.withdrawal.service import TransferService


def get_transfer_service(request: Request) -> TransferService:
    """Transfer service owned by the running application."""
    return request.app.state.transfer_service
