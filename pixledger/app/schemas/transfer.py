"""
PIX transfer Pydantic schemas.

The request carries no sender field: the sender is always the authenticated
account.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class PixTransferRequest(BaseModel):
    """
    Schema for POST /transfers/pix.

    `recipient_pix_key` and `amount` are validated by the transfer engine so
    every rejection carries its own error code.
    """
    recipient_pix_key: str = Field(..., description="PIX key of the recipient")
    amount: Decimal = Field(..., description="Amount, positive with at most two decimal places")
    description: Optional[str] = Field(None, max_length=500)


class PixTransferResponse(BaseModel):
    from_account_id: int
    to_account_id: int
    amount: Decimal
    description: Optional[str]
    debit_transaction_id: int
    credit_transaction_id: int
    created_at: datetime

    class Config:
        from_attributes = True
