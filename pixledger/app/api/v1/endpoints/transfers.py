"""
PIX transfer API endpoints.
"""

from fastapi import APIRouter, Depends, status
from pixledger.app.schemas.transfer import PixTransferRequest, PixTransferResponse
from pixledger.app.core.dependencies import get_current_user, get_transfer_engine
from pixledger.app.domain.transfers.transfer_engine import TransferEngine

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.post("/pix", response_model=PixTransferResponse, status_code=status.HTTP_201_CREATED)
async def pix_transfer(
    transfer: PixTransferRequest,
    current_user: dict = Depends(get_current_user),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Send money to the account that owns `recipient_pix_key`.

    The sender is always the authenticated account. Every rejection has its
    own `error_code` (unknown key, self transfer, insufficient funds, ...).
    """
    return await engine.transfer_by_alias(
        sender_id=current_user["account_id"],
        recipient_alias=transfer.recipient_pix_key,
        amount=transfer.amount,
        description=transfer.description,
    )
