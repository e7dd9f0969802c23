"""
Custom column types.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Numeric
from sqlalchemy.types import TypeDecorator

from pixledger.app.core.money import quantize_money


class Money(TypeDecorator):
    """
    Fixed-point monetary column, NUMERIC(15, 2).

    Values are quantized to cents on the way in and always come back as
    `Decimal`, including on backends that store NUMERIC as floating point.
    """

    impl = Numeric
    cache_ok = True

    def __init__(self):
        super().__init__(precision=15, scale=2, asdecimal=True)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return quantize_money(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return quantize_money(value)


def utcnow() -> datetime:
    """Timezone-aware now; used as the Python-side default for timestamps."""
    return datetime.now(timezone.utc)
