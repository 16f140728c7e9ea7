"""
Order Ledger

Persists an order and all its items as one unit of work. The customer is
resolved first, outside that unit: if the directory fails, the order is
still accepted without a customer reference.

Status changes are not checked against the expected workflow
(PENDING → PREPARING → READY → DELIVERED, CANCELED from any open state);
any of the five statuses may be written at any time.

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from espetinho.core.exceptions import DegradedPathError, NotFoundError, ValidationError
from espetinho.database import atomic
from espetinho.models import Order, OrderItem, OrderStatus, utc_now
from espetinho.schemas import OrderCreate, OrderResponse
from espetinho.services.customers import CustomerDirectory
from espetinho.services.repository import Repository

logger = logging.getLogger(__name__)


def validate_order(data: OrderCreate) -> List[str]:
    """Return one message per violated rule (empty when valid)."""
    errors: List[str] = []
    if not data.customer_name or not data.customer_name.strip():
        errors.append("Nome do cliente é obrigatório")
    if not data.phone or not data.phone.strip():
        errors.append("Telefone é obrigatório")
    if data.total is None or data.total <= 0:
        errors.append("Valor total deve ser maior que zero")
    return errors


class OrderManager:
    """
    Creates orders and moves them through their statuses.

    Args:
        session: Session owned by the current request
        customers: Directory used to resolve the customer; defaults to one
            bound to the same session
    """

    def __init__(self, session: AsyncSession, customers: Optional[CustomerDirectory] = None):
        self.session = session
        self.customers = customers or CustomerDirectory(session)
        self.orders = Repository(session, Order)
        self.items = Repository(session, OrderItem)

    async def create(self, data: OrderCreate) -> Order:
        """
        Persist an order with its items.

        Item prices are stored as given, so later product price changes never
        alter past orders. Item product ids are checked only by the foreign key.

        Raises:
            ValidationError: Blank customer name or phone, non-positive total
            TransactionError: An insert failed; no order row and no item row is kept
        """
        errors = validate_order(data)
        if errors:
            raise ValidationError(errors)

        customer_id = None
        try:
            customer = await self.customers.find_or_create(data.customer_name, data.phone)
            customer_id = customer.id
        except DegradedPathError as e:
            logger.warning(f"Order for {data.phone} will be saved without a customer: {e}")

        async with atomic(self.session, "criar pedido"):
            order = await self.orders.insert(
                created_at=utc_now(),
                status=OrderStatus.PENDING,
                total=data.total,
                customer_id=customer_id,
            )
            for item in data.items:
                await self.items.insert(
                    order_id=order.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )

        logger.info(
            f"Order #{order.id} created: {len(data.items)} item(s), "
            f"total {data.total}, customer {customer_id}"
        )
        return order

    async def update_status(self, order_id: int, status: str) -> int:
        """
        Set the status of an order.

        Args:
            order_id: Order to update
            status: One of PENDING, PREPARING, READY, DELIVERED, CANCELED
                (the Portuguese names are accepted too)

        Raises:
            ValidationError: Unknown status value
            NotFoundError: No order with this id
        """
        new_status = OrderStatus.parse(status)
        if new_status is None:
            valid = ", ".join(s.value for s in OrderStatus)
            raise ValidationError([f"Status inválido. Use: {valid}"])

        async with atomic(self.session, "atualizar status do pedido"):
            changed = await self.orders.update(order_id, status=new_status)
            if changed == 0:
                raise NotFoundError("Pedido não encontrado")

        logger.info(f"Order #{order_id} -> {new_status.value}")
        return changed

    async def get(self, order_id: int) -> OrderResponse:
        """Order with its customer and items (product names resolved)."""
        result = await self.session.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.customer),
                selectinload(Order.items).selectinload(OrderItem.product),
            )
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Pedido não encontrado")
        items = sorted(order.items, key=lambda i: i.id)
        return OrderResponse.from_order(order, item_count=len(items), items=items)

    async def list(self) -> List[OrderResponse]:
        """All orders with their customer, newest first."""
        return await self._summaries(order_by=(Order.created_at.desc(), Order.id.desc()))

    async def pending(self) -> List[OrderResponse]:
        """PENDING orders, oldest first (kitchen queue)."""
        return await self._summaries(
            Order.status == OrderStatus.PENDING,
            order_by=(Order.created_at.asc(), Order.id.asc()),
        )

    async def _summaries(self, *criteria, order_by) -> List[OrderResponse]:
        result = await self.session.execute(
            select(Order)
            .where(*criteria)
            .order_by(*order_by)
            .options(selectinload(Order.customer))
            .execution_options(populate_existing=True)
        )
        return [OrderResponse.from_order(order) for order in result.scalars().all()]
