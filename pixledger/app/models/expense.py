"""
Expense database model.

Recurring or one-off obligations scheduled by an account holder.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.sql import func

from pixledger.app.db.session import Base
from pixledger.app.db.types import Money, utcnow
from pixledger.app.models.enums import ExpenseStatus


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    is_recurring = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    amount = Column(Money, nullable=False)
    description = Column(String(255), nullable=False)
    execution_date = Column(DateTime(timezone=True), nullable=False, index=True)

    status = Column(Enum(ExpenseStatus), default=ExpenseStatus.PENDING, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
    )

    def __repr__(self):
        return f"<Expense(id={self.id}, status='{self.status.value}', amount={self.amount})>"
