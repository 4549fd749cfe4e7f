"""Store Routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from loyalty.api.dependencies import get_store_registry
from loyalty.core.domain_types import MallId, StoreId
from loyalty.core.errors import StoreNotFoundError
from loyalty.schemas.store import StoreCreate, StoreResponse
from loyalty.services.store_registry import StoreRegistry

router = APIRouter(prefix="/api/v1/stores", tags=["stores"])


@router.post(
    "", response_model=StoreResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_store(
    body: StoreCreate,
    registry: StoreRegistry = Depends(get_store_registry),
):
    return await registry.create_store(
        body.name, MallId(body.mall_id) if body.mall_id else None,
    )


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(
    store_id: UUID,
    registry: StoreRegistry = Depends(get_store_registry),
):
    store = await registry.get_store(StoreId(store_id))
    if store is None:
        raise StoreNotFoundError(str(store_id))
    return store
