"""
Transaction (ledger entry) database model.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.sql import func

from pixledger.app.db.session import Base
from pixledger.app.db.types import Money, utcnow
from pixledger.app.models.enums import TransactionCategory, TransactionType


class Transaction(Base):
    """
    Ledger entry.

    Append-only record of money entering (CREDIT) or leaving (DEBIT) an
    account. `type`, `amount` and `account_id` never change after insert;
    only `details` and `category` have an edit path.
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    type = Column(Enum(TransactionType), nullable=False)
    date = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    amount = Column(Money, nullable=False)
    details = Column(Text, nullable=True)

    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(Enum(TransactionCategory), default=TransactionCategory.OTHER, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        Index("ix_transactions_account_date", "account_id", "date"),
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, type='{self.type.value}', amount={self.amount})>"
