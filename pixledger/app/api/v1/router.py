"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from pixledger.app.api.v1.endpoints import auth, accounts, transactions, transfers, expenses

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Accounts and PIX keys
router.include_router(accounts.router)

# Ledger
router.include_router(transactions.router)
router.include_router(transfers.router)

# Scheduled expenses
router.include_router(expenses.router)
