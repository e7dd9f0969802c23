"""
Ledger entry Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pixledger.app.models.enums import TransactionCategory, TransactionType


class TransactionCreate(BaseModel):
    """
    Schema for a direct ledger entry on the caller's account.

    CREDIT is a deposit, DEBIT a withdrawal. The amount is checked by the
    ledger service (positive, whole cents).
    """
    type: TransactionType
    amount: Decimal = Field(..., description="Amount, at most two decimal places")
    details: Optional[str] = Field(None, max_length=1000)
    category: TransactionCategory = TransactionCategory.OTHER


class TransactionUpdate(BaseModel):
    """Only the descriptive fields of a ledger entry can change."""
    details: Optional[str] = Field(None, max_length=1000)
    category: Optional[TransactionCategory] = None


class TransactionResponse(BaseModel):
    id: int
    type: TransactionType
    date: datetime
    amount: Decimal
    details: Optional[str]
    account_id: int
    category: TransactionCategory
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
