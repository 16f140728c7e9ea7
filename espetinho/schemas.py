"""
Pydantic Schemas for Request/Response Validation

Request schemas accept both the Portuguese keys sent by the menu site and
the admin panel (nome, preco_unitario, id_categoria, ...) and the English
field names. Business rules (minimum lengths, positive prices, category
range) are checked by the entity managers so every violation is reported
at once; schemas only enforce types and shape.

Response schemas use English field names only.

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _alias(portuguese: str, english: str) -> AliasChoices:
    return AliasChoices(portuguese, english)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ProductCreate(BaseModel):
    """Request schema for creating a product together with its stock row."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., validation_alias=_alias("nome", "name"), examples=["Espeto de Carne"])
    description: Optional[str] = Field(
        None, validation_alias=_alias("descricao", "description")
    )
    unit_price: Decimal = Field(
        ..., validation_alias=_alias("preco_unitario", "unit_price"), examples=["12.50"]
    )
    category_id: int = Field(..., validation_alias=_alias("id_categoria", "category_id"), examples=[1])
    available: bool = Field(False, validation_alias=_alias("disponivel", "available"))


class ProductUpdate(BaseModel):
    """
    Request schema for updating a product.

    The name is fixed at creation; ``description`` becomes the stock row
    description.
    """
    model_config = ConfigDict(populate_by_name=True)

    unit_price: Decimal = Field(..., validation_alias=_alias("preco_unitario", "unit_price"))
    description: str = Field(..., validation_alias=_alias("descricao", "description"))
    category_id: int = Field(..., validation_alias=_alias("id_categoria", "category_id"))
    available: bool = Field(False, validation_alias=_alias("disponivel", "available"))


class StockCreate(BaseModel):
    """Request schema for creating or replacing a standalone stock row."""
    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(..., validation_alias=_alias("descricao", "description"))
    category_id: int = Field(..., validation_alias=_alias("id_categoria", "category_id"))
    available: bool = Field(False, validation_alias=_alias("disponivel", "available"))


class OrderItemCreate(BaseModel):
    """Single line of an order; unit_price is the menu price at order time."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., validation_alias=_alias("id_produto", "product_id"))
    quantity: int = Field(..., ge=1, validation_alias=_alias("quantidade", "quantity"))
    unit_price: Decimal = Field(
        ..., gt=0, validation_alias=_alias("preco_unitario", "unit_price")
    )


class OrderCreate(BaseModel):
    """Request schema posted by the menu site when the WhatsApp message is sent."""
    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(
        ..., validation_alias=_alias("cliente", "customer_name"), examples=["Ana"]
    )
    phone: str = Field(
        ..., validation_alias=_alias("telefone", "phone"), examples=["5561999999999"]
    )
    items: List[OrderItemCreate] = Field(default_factory=list, validation_alias=_alias("itens", "items"))
    total: Decimal = Field(..., validation_alias=_alias("valor_total", "total"), examples=["25.00"])

    @field_validator("customer_name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


class StatusUpdate(BaseModel):
    """Request schema for changing the status of an order."""
    status: str = Field(..., examples=["PREPARING"])


class LoginRequest(BaseModel):
    """Admin panel credentials."""
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., validation_alias=_alias("usuario", "username"))
    password: str = Field(..., validation_alias=_alias("senha", "password"))


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class CategoryResponse(BaseModel):
    """Response schema for a category."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None


class StockDetail(BaseModel):
    """Stock row joined with its category name."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    category_id: int
    category_name: Optional[str] = None
    registered_at: datetime
    available: bool

    @classmethod
    def from_row(cls, stock: Any, category_name: Optional[str] = None) -> "StockDetail":
        return cls(
            id=stock.id,
            description=stock.description,
            category_id=stock.category_id,
            category_name=category_name,
            registered_at=stock.registered_at,
            available=stock.available,
        )


class ProductDetail(BaseModel):
    """Product joined with its stock row and category."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = ""
    unit_price: float
    stock_id: int
    category_id: int
    category_name: Optional[str] = None
    available: bool
    registered_at: datetime

    @classmethod
    def from_row(cls, product: Any, stock: Any, category_name: Optional[str] = None) -> "ProductDetail":
        """Build from a (Product, StockItem, Category.name) result row."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description or "",
            unit_price=product.unit_price,
            stock_id=product.stock_id,
            category_id=stock.category_id,
            category_name=category_name,
            available=stock.available,
            registered_at=stock.registered_at,
        )


class ProductCreated(BaseModel):
    """Identifiers of the product/stock pair written by a create."""
    product_id: int
    stock_id: int


class CategoryProducts(BaseModel):
    """A category with the products stocked under it."""
    category: CategoryResponse
    products: List[ProductDetail]


class OrderItemResponse(BaseModel):
    """Order line with the product name resolved."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: float
    subtotal: float

    @classmethod
    def from_item(cls, item: Any) -> "OrderItemResponse":
        """Build from an OrderItem whose ``product`` relationship is loaded."""
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product.name if item.product is not None else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.unit_price * item.quantity,
        )


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    status: str
    total: float
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    item_count: Optional[int] = None
    items: Optional[List[OrderItemResponse]] = None

    @classmethod
    def from_order(
        cls,
        order: Any,
        item_count: Optional[int] = None,
        items: Optional[List[Any]] = None,
    ) -> "OrderResponse":
        """
        Build from an Order whose ``customer`` relationship is loaded.

        Args:
            order: Order row
            item_count: Number of lines, when the caller aggregated it
            items: OrderItem rows with ``product`` loaded, for the detail view
        """
        customer = order.customer
        return cls(
            id=order.id,
            created_at=order.created_at,
            status=order.status.value,
            total=order.total,
            customer_id=order.customer_id,
            customer_name=customer.name if customer is not None else None,
            customer_phone=customer.phone if customer is not None else None,
            item_count=item_count,
            items=[OrderItemResponse.from_item(i) for i in items] if items is not None else None,
        )


class StatisticsResponse(BaseModel):
    """Order count and revenue over the trailing window."""
    order_count: int
    revenue: float
    computed_at: datetime
    window_hours: int = 24


class SuccessResponse(BaseModel):
    """Envelope returned by write endpoints."""
    success: bool = True
    message: str
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Envelope returned by the exception handlers."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: datetime
    version: str
    database: Optional[str] = None
