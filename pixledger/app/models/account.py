"""
Account and PIX key database models.
"""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pixledger.app.db.session import Base
from pixledger.app.db.types import Money, utcnow
from pixledger.app.models.enums import AccountType, PixKeyType


class Account(Base):
    """
    Account model.

    Holds identity, balance and PIX keys. The balance is only ever written by
    `AccountStore.update_balance`, and the CHECK constraint keeps it
    non-negative whatever the caller does.
    """
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    type = Column(Enum(AccountType), default=AccountType.NORMAL, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    balance = Column(Money, nullable=False, default=0)
    score = Column(Integer, nullable=False, default=0)

    # Free-form settings (string keys, any JSON value)
    configuration = Column(JSON, nullable=False, default=dict)

    # Weak reference into the agent profile store (redis); may dangle
    agent_document_id = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)

    pix_keys = relationship(
        "PixKey",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="PixKey.id",
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
        CheckConstraint("score >= 0 AND score <= 1000", name="ck_accounts_score_range"),
    )

    def __repr__(self):
        return f"<Account(id={self.id}, email='{self.email}', balance={self.balance})>"


class PixKey(Base):
    """
    PIX key (alias) model.

    The UNIQUE index on `key` is what guarantees an alias resolves to exactly
    one account, even under concurrent inserts.
    """
    __tablename__ = "account_pix_keys"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(PixKeyType), default=PixKeyType.OTHER, nullable=False)
    key = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    account = relationship("Account", back_populates="pix_keys")

    def __repr__(self):
        return f"<PixKey(key='{self.key}', type='{self.type.value}', account_id={self.account_id})>"
