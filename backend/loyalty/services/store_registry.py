"""Store Registry — create and look up stores."""

from sqlalchemy.ext.asyncio import AsyncSession

from loyalty.core.domain_types import MallId, StoreId
from loyalty.core.errors import ValidationError
from loyalty.models.store import Store


class StoreRegistry:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_store(self, name: str | None, mall_id: MallId | None = None) -> Store:
        """Persist a store with a trimmed, non-empty name."""
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Store name is required", "name")
        store = Store(name=cleaned, mall_id=mall_id)
        self.db.add(store)
        await self.db.commit()
        return store

    async def get_store(self, store_id: StoreId) -> Store | None:
        return await self.db.get(Store, store_id)
