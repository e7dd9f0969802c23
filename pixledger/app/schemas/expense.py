"""
Expense Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pixledger.app.models.enums import ExpenseStatus


class ExpenseCreate(BaseModel):
    """Schema for scheduling an expense."""
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=255)
    execution_date: datetime
    is_recurring: bool = False
    is_active: bool = True
    status: ExpenseStatus = ExpenseStatus.PENDING


class ExpenseUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    execution_date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    is_active: Optional[bool] = None
    status: Optional[ExpenseStatus] = None


class ExpenseResponse(BaseModel):
    id: int
    account_id: int
    is_recurring: bool
    is_active: bool
    amount: Decimal
    description: str
    execution_date: datetime
    status: ExpenseStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
