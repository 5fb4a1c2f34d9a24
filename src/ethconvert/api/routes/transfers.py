"""Transfer endpoints.

Every route below runs the same pipeline; the names exist so that callers
written against any of them keep working.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from ethconvert.api.dependencies import get_transfer_service
from ethconvert.contracts import ErrorResponse, TransferRequest, TransferResponse
from ethconvert.withdrawal.service import TransferService

TRANSFER_ROUTES = (
    "/convert",
    "/send-eth",
    "/withdraw",
    "/transfer",
    "/coinbase-withdraw",
    "/convert-earnings-to-eth",
    "/fund-from-earnings",
    "/earnings-to-treasury",
    "/withdraw-profits-to-treasury",
    "/claim-mev-profits",
    "/execute",
    "/direct-transfer",
    "/batch-transfer",
    "/eip1559-transfer",
)

router = APIRouter(tags=["Transfers"])


async def universal_transfer(
    request: Request,
    body: Optional[TransferRequest] = None,
    service: TransferService = Depends(get_transfer_service),
) -> TransferResponse:
    """Send ETH from the custodial wallet and wait for one confirmation.

    Amount: ``percentage`` of balance, else ``amountUSD``, else
    ``amountETH``/``amount``/``value``/``eth``, always leaving the gas
    reserve behind. Destination: first of ``to``, ``toAddress``,
    ``treasury``, ``recipient``, ``coinbaseWallet``, ``feeRecipient``, else
    the treasury.
    """
    return await service.transfer(body or TransferRequest(), endpoint=request.url.path)


for _path in TRANSFER_ROUTES:
    router.add_api_route(
        _path,
        universal_transfer,
        methods=["POST"],
        response_model=TransferResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        name=f"transfer:{_path.strip('/')}",
    )
