"""
Generic Repository

Shared CRUD over one mapped class. Entity managers hold one repository per
table they touch and add their multi-table operations on top.

Nothing here commits: the caller owns the transaction (see
``espetinho.database.atomic``).
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from espetinho.database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    CRUD helper parameterised by a mapped class.

    Args:
        session: Session owned by the current request
        model: Mapped class (Product, StockItem, ...)
        pk: Name of the primary key column (default "id")

    Example:
        >>> products = Repository(session, Product)
        >>> product = await products.find_by_id(1)
    """

    def __init__(self, session: AsyncSession, model: Type[ModelT], pk: str = "id"):
        self.session = session
        self.model = model
        self.pk_column = getattr(model, pk)

    async def find_all(self, *criteria: Any, order_by: Any = None) -> List[ModelT]:
        """Return every row matching ``criteria``, optionally ordered."""
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_id(self, id: int) -> Optional[ModelT]:
        result = await self.session.execute(
            select(self.model).where(self.pk_column == id)
        )
        return result.scalar_one_or_none()

    async def insert(self, **values: Any) -> ModelT:
        """
        Add a new row and flush it so generated values (id, defaults) are set.

        Returns:
            The persisted instance
        """
        instance = self.model(**values)
        self.session.add(instance)
        await self.session.flush()
        logger.debug(f"Inserted {instance!r}")
        return instance

    async def update(self, id: int, **values: Any) -> int:
        """
        Update the row with the given id.

        Returns:
            Number of rows changed (0 when the id does not resolve)
        """
        result = await self.session.execute(
            update(self.model)
            .where(self.pk_column == id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def remove(self, id: int) -> int:
        """
        Delete the row with the given id.

        Returns:
            Number of rows deleted (0 when the id does not resolve)
        """
        result = await self.session.execute(
            delete(self.model)
            .where(self.pk_column == id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def count(self, *criteria: Any) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar_one()
