"""
Product Catalog & Stock Ledger

Every Product owns exactly one StockItem. The pair is created, updated and
deleted inside a single ``atomic`` block so readers never observe one row
without the other.

Standalone stock rows (supplies registered from the admin panel without a
sellable product) are managed by ``StockManager``.

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from espetinho.core.exceptions import NotFoundError, ValidationError
from espetinho.database import atomic
from espetinho.models import Category, Product, StockItem, utc_now
from espetinho.schemas import (
    ProductCreate,
    ProductCreated,
    ProductDetail,
    ProductUpdate,
    StockCreate,
    StockDetail,
)
from espetinho.services.categories import VALID_CATEGORY_IDS
from espetinho.services.repository import Repository

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION
# =============================================================================

def _check_category(category_id: int, errors: List[str]) -> None:
    if category_id not in VALID_CATEGORY_IDS:
        errors.append("Categoria inválida")


def _check_price(unit_price: Optional[Decimal], errors: List[str]) -> None:
    if unit_price is None or unit_price <= 0:
        errors.append("Preço deve ser maior que zero")


def _check_description(description: Optional[str], errors: List[str]) -> None:
    if not description or len(description.strip()) < 3:
        errors.append("Descrição deve ter pelo menos 3 caracteres")


def validate_product_create(data: ProductCreate) -> List[str]:
    """Return one message per violated rule (empty when valid)."""
    errors: List[str] = []
    if not data.name or len(data.name.strip()) < 2:
        errors.append("Nome deve ter pelo menos 2 caracteres")
    _check_price(data.unit_price, errors)
    _check_category(data.category_id, errors)
    return errors


def validate_product_update(data: ProductUpdate) -> List[str]:
    errors: List[str] = []
    _check_price(data.unit_price, errors)
    _check_description(data.description, errors)
    _check_category(data.category_id, errors)
    return errors


def validate_stock(data: StockCreate) -> List[str]:
    errors: List[str] = []
    _check_description(data.description, errors)
    _check_category(data.category_id, errors)
    return errors


# =============================================================================
# PRODUCT MANAGER
# =============================================================================

class ProductManager:
    """
    Keeps Product and StockItem rows consistent.

    Args:
        session: Session owned by the current request

    Example:
        >>> manager = ProductManager(session)
        >>> created = await manager.create(ProductCreate(name="Espeto de Carne",
        ...     unit_price=Decimal("12.50"), category_id=1))
        >>> detail = await manager.get(created.product_id)
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = Repository(session, Product)
        self.stock = Repository(session, StockItem)

    async def create(self, data: ProductCreate) -> ProductCreated:
        """
        Insert the stock row, then the product referencing it.

        Raises:
            ValidationError: Short name, non-positive price or unknown category
            TransactionError: Either insert failed; neither row is kept
        """
        errors = validate_product_create(data)
        if errors:
            raise ValidationError(errors)

        name = data.name.strip()
        async with atomic(self.session, "criar produto"):
            stock = await self.stock.insert(
                description=name,
                category_id=data.category_id,
                registered_at=utc_now(),
                available=data.available,
            )
            product = await self.products.insert(
                name=name,
                description=(data.description or "").strip(),
                unit_price=data.unit_price,
                stock_id=stock.id,
            )

        logger.info(f"Product #{product.id} created with stock #{stock.id}")
        return ProductCreated(product_id=product.id, stock_id=stock.id)

    async def update(self, product_id: int, data: ProductUpdate) -> int:
        """
        Update the product price and its stock row in one transaction.

        Returns:
            Number of product rows changed

        Raises:
            ValidationError: Non-positive price, short description or unknown category
            NotFoundError: No product with this id; nothing is written
            TransactionError: A statement failed and both were rolled back
        """
        errors = validate_product_update(data)
        if errors:
            raise ValidationError(errors)

        async with atomic(self.session, "atualizar produto"):
            product = await self.products.find_by_id(product_id)
            if product is None:
                raise NotFoundError("Produto não encontrado")

            changed = await self.products.update(product_id, unit_price=data.unit_price)
            await self.stock.update(
                product.stock_id,
                description=data.description.strip(),
                category_id=data.category_id,
                available=data.available,
            )

        logger.info(f"Product #{product_id} updated")
        return changed

    async def delete(self, product_id: int) -> int:
        """
        Delete the product and the stock row it owns.

        Raises:
            NotFoundError: No product with this id
            TransactionError: A delete failed (e.g. the product appears on an
                order); both rows are kept
        """
        async with atomic(self.session, "excluir produto"):
            product = await self.products.find_by_id(product_id)
            if product is None:
                raise NotFoundError("Produto não encontrado")

            stock_id = product.stock_id
            changed = await self.products.remove(product_id)
            await self.stock.remove(stock_id)

        logger.info(f"Product #{product_id} deleted with stock #{stock_id}")
        return changed

    def _detail_query(self):
        return (
            select(Product, StockItem, Category.name)
            .join(StockItem, Product.stock_id == StockItem.id)
            .join(Category, StockItem.category_id == Category.id)
        )

    async def get(self, product_id: int) -> ProductDetail:
        result = await self.session.execute(
            self._detail_query().where(Product.id == product_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("Produto não encontrado")
        return ProductDetail.from_row(*row)

    async def list(self) -> List[ProductDetail]:
        """All products, most recently registered first."""
        result = await self.session.execute(
            self._detail_query().order_by(StockItem.registered_at.desc(), Product.id.desc())
        )
        return [ProductDetail.from_row(*row) for row in result.all()]


# =============================================================================
# STOCK MANAGER
# =============================================================================

class StockManager:
    """Standalone inventory rows."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.stock = Repository(session, StockItem)
        self.products = Repository(session, Product)

    async def list(self) -> List[StockDetail]:
        result = await self.session.execute(
            select(StockItem, Category.name)
            .join(Category, StockItem.category_id == Category.id)
            .order_by(StockItem.registered_at.desc(), StockItem.id.desc())
        )
        return [StockDetail.from_row(stock, name) for stock, name in result.all()]

    async def get(self, stock_id: int) -> StockDetail:
        result = await self.session.execute(
            select(StockItem, Category.name)
            .join(Category, StockItem.category_id == Category.id)
            .where(StockItem.id == stock_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("Item de estoque não encontrado")
        return StockDetail.from_row(*row)

    async def create(self, data: StockCreate) -> StockDetail:
        errors = validate_stock(data)
        if errors:
            raise ValidationError(errors)

        async with atomic(self.session, "criar item de estoque"):
            stock = await self.stock.insert(
                description=data.description.strip(),
                category_id=data.category_id,
                registered_at=utc_now(),
                available=data.available,
            )

        logger.info(f"Stock item #{stock.id} created")
        return await self.get(stock.id)

    async def update(self, stock_id: int, data: StockCreate) -> int:
        errors = validate_stock(data)
        if errors:
            raise ValidationError(errors)

        async with atomic(self.session, "atualizar item de estoque"):
            changed = await self.stock.update(
                stock_id,
                description=data.description.strip(),
                category_id=data.category_id,
                available=data.available,
            )
            if changed == 0:
                raise NotFoundError("Item de estoque não encontrado")
        return changed

    async def delete(self, stock_id: int) -> int:
        """
        Delete a stock row that no product references.

        Raises:
            ValidationError: A product still references the row
            NotFoundError: No stock row with this id
        """
        async with atomic(self.session, "excluir item de estoque"):
            if await self.is_used_in_products(stock_id):
                raise ValidationError(
                    ["Este item de estoque está em uso por produtos e não pode ser excluído"]
                )
            changed = await self.stock.remove(stock_id)
            if changed == 0:
                raise NotFoundError("Item de estoque não encontrado")

        logger.info(f"Stock item #{stock_id} deleted")
        return changed

    async def available_by_category(self, category_id: int) -> List[StockItem]:
        return await self.stock.find_all(
            StockItem.category_id == category_id,
            StockItem.available.is_(True),
            order_by=StockItem.description,
        )

    async def is_used_in_products(self, stock_id: int) -> bool:
        return await self.products.count(Product.stock_id == stock_id) > 0
