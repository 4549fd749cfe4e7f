"""Transaction Routes — receipt intake and lookup.

Invariants:
    - POST returns 201 with the new balance so clients skip a second read
    - Duplicate receipt ids are rejected by the service, never by a route-level check
"""

from fastapi import APIRouter, Depends, status

from loyalty.api.dependencies import get_queries, get_transaction_processor
from loyalty.core.domain_types import MallId, StoreId
from loyalty.schemas.transaction import (
    TransactionCreate, TransactionCreatedResponse, TransactionResponse,
)
from loyalty.services.loyalty_queries import LoyaltyQueries
from loyalty.services.transaction_processor import TransactionProcessor

router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.post(
    "", response_model=TransactionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_transaction(
    body: TransactionCreate,
    processor: TransactionProcessor = Depends(get_transaction_processor),
):
    """Record a receipt and credit its points."""
    result = await processor.process_transaction(
        body.phone_number,
        StoreId(body.store_id),
        body.receipt_id,
        body.receipt_description,
        body.price,
        body.created_at,
        mall_id=MallId(body.mall_id) if body.mall_id else None,
    )
    return TransactionCreatedResponse(
        transaction_id=result.transaction_id,
        user_id=result.user_id,
        store_id=result.store_id,
        receipt_id=result.receipt_id,
        price=result.price,
        points=result.points,
        new_total_points=result.new_total_points,
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    queries: LoyaltyQueries = Depends(get_queries),
):
    return await queries.get_transaction(transaction_id)
