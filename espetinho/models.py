"""
SQLAlchemy Database Models

Seven tables linking the catalog and the order ledger:
    Category 1──N StockItem 1──1 Product 1──N OrderItem N──1 Order N──1 Customer

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from espetinho.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """
    Order status workflow.

    Expected flow is PENDING → PREPARING → READY → DELIVERED, with CANCELED
    reachable from any non-terminal state. Transitions are not enforced:
    any value can be written from any other value.
    """
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"

    @classmethod
    def parse(cls, value: str) -> Optional["OrderStatus"]:
        """Resolve an English or legacy Portuguese status name, or None."""
        if not isinstance(value, str):
            return None
        key = value.strip().upper()
        key = LEGACY_STATUS_NAMES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


# Status names sent by the legacy admin panel
LEGACY_STATUS_NAMES = {
    "PENDENTE": "PENDING",
    "PREPARANDO": "PREPARING",
    "PRONTO": "READY",
    "ENTREGUE": "DELIVERED",
    "CANCELADO": "CANCELED",
}


class Category(Base):
    """Fixed product category (1=ESPETOS, 2=BEBIDAS, 3=INSUMOS)."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    stock_items = relationship("StockItem", back_populates="category")

    def __repr__(self):
        return f"<Category #{self.id} {self.name}>"


class StockItem(Base):
    """
    Inventory row.

    Created together with its Product; standalone rows may also be
    registered from the admin panel.
    """
    __tablename__ = "stock_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    description = Column(String(255), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    registered_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    available = Column(Boolean, nullable=False, default=False)

    category = relationship("Category", back_populates="stock_items")
    product = relationship("Product", back_populates="stock", uselist=False)

    def __repr__(self):
        return f"<StockItem #{self.id} {self.description!r} cat={self.category_id}>"


class Product(Base):
    """Sellable item bound 1:1 to a StockItem."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(128), nullable=False)
    description = Column(Text, nullable=True, default="")
    unit_price = Column(Numeric(10, 2), nullable=False)
    stock_id = Column(Integer, ForeignKey("stock_items.id"), nullable=False, index=True)

    stock = relationship("StockItem", back_populates="product")
    order_items = relationship("OrderItem", back_populates="product")

    def __repr__(self):
        return f"<Product #{self.id} {self.name!r} {self.unit_price}>"


class Customer(Base):
    """Customer created on first order, looked up by phone."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False, index=True)

    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer #{self.id} {self.name} {self.phone}>"


class Order(Base):
    """Order placed from the menu site; never deleted."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    status = Column(
        Enum(OrderStatus, name="order_status"),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    total = Column(Numeric(10, 2), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")

    def __repr__(self):
        return f"<Order #{self.id} - {self.status.value} - {self.total}>"


class OrderItem(Base):
    """Order line; unit_price is the price at order time, not a live reference."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
