"""Shared base for SQLModel domain entities"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import BigInteger, Integer, Numeric
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel


# SQLite only auto-increments INTEGER PRIMARY KEY columns
BigIntegerId = BigInteger().with_variant(Integer(), "sqlite")

TOKEN_QUANTUM = Decimal("0.000001")
MICRO_UNITS = 1_000_000


class TokenAmount(TypeDecorator):
    """
    Exact token amount column, NUMERIC(18, 6)

    SQLite keeps NUMERIC values as 8-byte floats, which round past ~15
    significant digits, so there the amount is stored as an integer count of
    micro-units. SUM() over the column stays exact on both backends.
    """

    impl = Numeric(18, 6)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(18, 6))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return int((Decimal(value) * MICRO_UNITS).to_integral_value())

    def process_result_value(self, value, dialect):
        if value is None or dialect.name != "sqlite":
            return value
        return (Decimal(value) / MICRO_UNITS).quantize(TOKEN_QUANTUM)


class BaseModel(SQLModel):
    pass


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
