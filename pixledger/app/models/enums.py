"""
Domain enumerations.

Closed value sets for accounts, PIX keys, ledger entries and expenses.
"""

import enum


class AccountType(str, enum.Enum):
    """
    Account type enumeration.

    Types:
        ADMIN: Can list accounts and adjust scores
        NORMAL: Regular account holder (default)
    """
    ADMIN = "ADMIN"
    NORMAL = "NORMAL"


class PixKeyType(str, enum.Enum):
    """PIX key type. Descriptive only, never used to validate the key."""
    EMAIL = "EMAIL"
    DOCUMENT = "DOCUMENT"
    PHONE = "PHONE"
    RANDOM = "RANDOM"
    OTHER = "OTHER"


class TransactionType(str, enum.Enum):
    """Ledger entry type enumeration."""
    DEBIT = "DEBIT"  # Money leaving the account
    CREDIT = "CREDIT"  # Money entering the account


class TransactionCategory(str, enum.Enum):
    FOOD = "FOOD"
    TRANSPORT = "TRANSPORT"
    ENTERTAINMENT = "ENTERTAINMENT"
    EXPENSES = "EXPENSES"
    OTHER = "OTHER"


class ExpenseStatus(str, enum.Enum):
    """Expense status enumeration."""
    PENDING = "PENDING"  # Scheduled, not executed yet
    FAILED = "FAILED"
    SUCCESS = "SUCCESS"
