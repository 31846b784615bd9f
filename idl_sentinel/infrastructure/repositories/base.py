"""Base repository with common CRUD operations."""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from idl_sentinel.infrastructure.database.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
EntityType = TypeVar("EntityType")


class BaseRepository(Generic[ModelType, EntityType]):
    """Base repository providing common operations.

    Subclasses should set:
    - model_class: The SQLAlchemy model class
    - Implement to_entity and from_entity methods on the model
    """

    model_class: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> EntityType | None:
        """Get entity by primary key."""
        result = await self.session.get(self.model_class, id)
        if result is None:
            return None
        return result.to_entity()  # type: ignore[attr-defined]

    async def add(self, entity: EntityType) -> EntityType:
        """Insert a new entity."""
        model = self.model_class.from_entity(entity)  # type: ignore[attr-defined]
        self.session.add(model)
        await self.session.flush()
        return model.to_entity()
