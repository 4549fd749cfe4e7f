"""Transaction Schemas — receipt intake and lookup.

Invariants:
    - price travels as Decimal end to end (JSON numbers and strings both accepted)
    - Range checks on price/receipt live in TransactionProcessor, not here
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TransactionCreate(BaseModel):
    phone_number: str = Field("", max_length=40)
    store_id: UUID
    mall_id: UUID | None = None
    receipt_id: str = Field("", max_length=100)
    receipt_description: str | None = Field(None, max_length=2000)
    price: Decimal
    created_at: datetime | None = None


class TransactionCreatedResponse(BaseModel):
    transaction_id: int
    user_id: UUID
    store_id: UUID
    receipt_id: str
    price: Decimal
    points: int
    new_total_points: int


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: UUID
    store_id: UUID
    receipt_id: str
    receipt_description: str | None
    price: Decimal
    points: int
    created_at: datetime
