"""
Category Registry

Read-only access to the fixed category set seeded at startup
(1=ESPETOS, 2=BEBIDAS, 3=INSUMOS).
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from espetinho.core.exceptions import NotFoundError
from espetinho.database import DEFAULT_CATEGORIES
from espetinho.models import Category, Product, StockItem
from espetinho.schemas import CategoryProducts, CategoryResponse, ProductDetail
from espetinho.services.repository import Repository

logger = logging.getLogger(__name__)

VALID_CATEGORY_IDS = frozenset(category_id for category_id, _, _ in DEFAULT_CATEGORIES)


class CategoryRegistry:
    """Lookups over the ``categories`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.categories = Repository(session, Category)

    async def list(self) -> List[Category]:
        return await self.categories.find_all(order_by=Category.id)

    async def get(self, category_id: int) -> Category:
        category = await self.categories.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Categoria não encontrada")
        return category

    async def exists(self, category_id: int) -> bool:
        return await self.categories.count(Category.id == category_id) > 0

    async def products_of(self, category_id: int) -> CategoryProducts:
        """
        List the products whose stock row belongs to a category.

        Raises:
            NotFoundError: Unknown category id
        """
        category = await self.get(category_id)
        result = await self.session.execute(
            select(Product, StockItem)
            .join(StockItem, Product.stock_id == StockItem.id)
            .where(StockItem.category_id == category_id)
            .order_by(Product.name)
        )
        products = [
            ProductDetail.from_row(product, stock, category.name)
            for product, stock in result.all()
        ]
        return CategoryProducts(
            category=CategoryResponse.model_validate(category),
            products=products,
        )
