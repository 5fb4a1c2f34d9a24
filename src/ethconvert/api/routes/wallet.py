"""Read-only wallet endpoints."""

from fastapi import APIRouter, Depends

from ethconvert.api.dependencies import get_transfer_service
from ethconvert.api.routes.transfers import TRANSFER_ROUTES
from ethconvert.contracts import BalanceResponse, ErrorResponse, StatusResponse
from ethconvert.withdrawal.service import TransferService

router = APIRouter(tags=["Wallet"])


@router.get(
    "/balance",
    response_model=BalanceResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_balance(service: TransferService = Depends(get_transfer_service)) -> BalanceResponse:
    """Current signer balance in ETH and USD, plus treasury addresses."""
    return await service.get_balance_info()


@router.get("/status", response_model=StatusResponse)
async def get_status(service: TransferService = Depends(get_transfer_service)) -> StatusResponse:
    """Bound signer, balance and supported transfer routes."""
    return await service.get_status(list(TRANSFER_ROUTES))
