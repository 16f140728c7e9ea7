"""
Customer Directory

Customers are created on their first order and looked up by phone number
afterwards. The stored name is the one given on the first order.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from espetinho.core.exceptions import DegradedPathError, NotFoundError
from espetinho.models import Customer, Order, OrderItem
from espetinho.schemas import OrderResponse
from espetinho.services.repository import Repository

logger = logging.getLogger(__name__)


class CustomerDirectory:
    """Find-or-create access to the ``customers`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customers = Repository(session, Customer)

    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        matches = await self.customers.find_all(
            Customer.phone == phone.strip(), order_by=Customer.id
        )
        return matches[0] if matches else None

    async def get(self, customer_id: int) -> Customer:
        customer = await self.customers.find_by_id(customer_id)
        if customer is None:
            raise NotFoundError("Cliente não encontrado")
        return customer

    async def find_or_create(self, name: str, phone: str) -> Customer:
        """
        Return the customer registered under ``phone``, creating it if absent.

        An existing customer is returned unchanged even when ``name`` differs.
        A new customer is committed immediately, in its own unit of work.

        Raises:
            DegradedPathError: The lookup or the insert failed
        """
        try:
            customer = await self.find_by_phone(phone)
            if customer is not None:
                return customer

            customer = await self.customers.insert(name=name.strip(), phone=phone.strip())
            await self.session.commit()
            logger.info(f"Customer #{customer.id} registered for {customer.phone}")
            return customer
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Customer resolution failed for {phone}: {e}")
            raise DegradedPathError(f"Falha ao identificar cliente {phone}") from e

    async def orders_of(self, customer_id: int) -> List[OrderResponse]:
        """
        Orders placed by a customer with their item counts, newest first.

        Raises:
            NotFoundError: Unknown customer id
        """
        await self.get(customer_id)

        item_count = func.count(OrderItem.id).label("item_count")
        result = await self.session.execute(
            select(Order, item_count)
            .outerjoin(OrderItem, OrderItem.order_id == Order.id)
            .where(Order.customer_id == customer_id)
            .group_by(Order.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .options(selectinload(Order.customer))
            .execution_options(populate_existing=True)
        )
        return [OrderResponse.from_order(order, item_count=count) for order, count in result.all()]
