"""
Audit Log Database Model.

Tracks security events and money movement for compliance and monitoring.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from pixledger.app.db.session import Base
from pixledger.app.db.types import utcnow


class AuditLog(Base):
    """
    Audit log model for tracking security events and money movement.

    Events logged:
    - ACCOUNT_CREATED / ACCOUNT_UPDATED / ACCOUNT_DELETED
    - LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - PIX_KEY_ADDED / PIX_KEY_REMOVED
    - TRANSFER_COMPLETED / LEDGER_ENTRY_RECORDED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_email = Column(String(255), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Account affected by the action, if any. Not a foreign key: audit rows
    # outlive deleted accounts.
    target_account_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # IP address for login tracking
    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email}, target={self.target_account_id})>"
