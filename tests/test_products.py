from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from espetinho.core.exceptions import NotFoundError, TransactionError, ValidationError
from espetinho.models import OrderItem, Product, StockItem
from espetinho.schemas import OrderCreate, OrderItemCreate, ProductCreate, ProductUpdate
from espetinho.services import OrderManager, ProductManager, Repository


async def count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_create_writes_product_and_stock(session, beef_skewer):
    detail = await ProductManager(session).get(beef_skewer.product_id)
    stock = await session.get(StockItem, beef_skewer.stock_id)

    assert detail.stock_id == beef_skewer.stock_id
    assert detail.category_id in {1, 2, 3}
    assert detail.category_name == "ESPETOS"
    assert detail.unit_price == 12.5
    assert detail.description == ""
    assert stock.description == "Beef Skewer"
    assert stock.available is True
    assert stock.registered_at is not None


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"name": "B", "unit_price": Decimal("5"), "category_id": 1}, "Nome"),
        ({"name": "Beer", "unit_price": Decimal("0"), "category_id": 2}, "Preço"),
        ({"name": "Beer", "unit_price": Decimal("-1"), "category_id": 2}, "Preço"),
        ({"name": "Beer", "unit_price": Decimal("5"), "category_id": 4}, "Categoria"),
    ],
)
async def test_create_rejects_invalid_fields(session, fields, message):
    with pytest.raises(ValidationError) as exc:
        await ProductManager(session).create(ProductCreate(**fields))

    assert any(message in e for e in exc.value.errors)
    assert await count(session, Product) == 0
    assert await count(session, StockItem) == 0


async def test_create_reports_every_violation(session):
    with pytest.raises(ValidationError) as exc:
        await ProductManager(session).create(
            ProductCreate(name=" ", unit_price=Decimal("0"), category_id=9)
        )

    assert len(exc.value.errors) == 3


async def test_update_changes_price_and_stock_row(session, beef_skewer):
    manager = ProductManager(session)

    changed = await manager.update(
        beef_skewer.product_id,
        ProductUpdate(unit_price=Decimal("15.00"), description="desc", category_id=2, available=False),
    )
    detail = await manager.get(beef_skewer.product_id)

    assert changed == 1
    assert detail.unit_price == 15.0
    assert detail.category_id == 2
    assert detail.category_name == "BEBIDAS"
    assert detail.available is False
    assert detail.name == "Beef Skewer"


async def test_update_validates_before_lookup(session, beef_skewer):
    with pytest.raises(ValidationError) as exc:
        await ProductManager(session).update(
            beef_skewer.product_id,
            ProductUpdate(unit_price=Decimal("15.00"), description="ab", category_id=1),
        )

    assert exc.value.errors == ["Descrição deve ter pelo menos 3 caracteres"]
    assert (await ProductManager(session).get(beef_skewer.product_id)).unit_price == 12.5


async def test_update_unknown_product(session, beef_skewer):
    with pytest.raises(NotFoundError):
        await ProductManager(session).update(
            999, ProductUpdate(unit_price=Decimal("1.00"), description="desc", category_id=1)
        )

    stock = await session.get(StockItem, beef_skewer.stock_id)
    assert stock.description == "Beef Skewer"


async def test_delete_removes_both_rows(session, beef_skewer):
    manager = ProductManager(session)

    assert await manager.delete(beef_skewer.product_id) == 1
    assert await session.get(Product, beef_skewer.product_id) is None
    assert await session.get(StockItem, beef_skewer.stock_id) is None

    with pytest.raises(NotFoundError):
        await manager.delete(beef_skewer.product_id)


async def test_delete_unknown_product_touches_nothing(session, beef_skewer):
    with pytest.raises(NotFoundError):
        await ProductManager(session).delete(999)

    assert await count(session, Product) == 1
    assert await count(session, StockItem) == 1


async def test_delete_product_on_an_order_keeps_both_rows(session, beef_skewer):
    await OrderManager(session).create(
        OrderCreate(
            customer_name="Ana",
            phone="5561999999999",
            items=[OrderItemCreate(product_id=beef_skewer.product_id, quantity=1, unit_price=Decimal("12.50"))],
            total=Decimal("12.50"),
        )
    )

    with pytest.raises(TransactionError):
        await ProductManager(session).delete(beef_skewer.product_id)

    assert await session.get(Product, beef_skewer.product_id) is not None
    assert await session.get(StockItem, beef_skewer.stock_id) is not None
    assert await count(session, OrderItem) == 1


async def test_list_newest_first(session, beef_skewer):
    manager = ProductManager(session)
    second = await manager.create(ProductCreate(name="Coca-Cola", unit_price=Decimal("6"), category_id=2))

    products = await manager.list()

    assert [p.id for p in products] == [second.product_id, beef_skewer.product_id]


async def test_availability_defaults_to_false(session, beef_skewer):
    manager = ProductManager(session)
    created = await manager.create(ProductCreate(name="Guaraná", unit_price=Decimal("6"), category_id=2))

    await manager.update(
        beef_skewer.product_id,
        ProductUpdate.model_validate({"preco_unitario": 15, "descricao": "desc", "id_categoria": 2}),
    )

    assert (await manager.get(created.product_id)).available is False
    assert (await manager.get(beef_skewer.product_id)).available is False


async def test_failed_product_insert_leaves_no_stock_row(session, monkeypatch):
    original_insert = Repository.insert

    async def insert(self, **values):
        if self.model is Product:
            raise OperationalError("INSERT INTO products", {}, Exception("disk I/O error"))
        return await original_insert(self, **values)

    monkeypatch.setattr(Repository, "insert", insert)

    with pytest.raises(TransactionError):
        await ProductManager(session).create(
            ProductCreate(name="Beef Skewer", unit_price=Decimal("12.50"), category_id=1)
        )

    assert await count(session, Product) == 0
    assert await count(session, StockItem) == 0


async def test_failed_stock_update_keeps_old_price(session, beef_skewer, monkeypatch):
    original_update = Repository.update

    async def update(self, id, **values):
        if self.model is StockItem:
            raise OperationalError("UPDATE stock_items", {}, Exception("disk I/O error"))
        return await original_update(self, id, **values)

    monkeypatch.setattr(Repository, "update", update)

    with pytest.raises(TransactionError):
        await ProductManager(session).update(
            beef_skewer.product_id,
            ProductUpdate(unit_price=Decimal("15.00"), description="desc", category_id=2, available=True),
        )

    detail = await ProductManager(session).get(beef_skewer.product_id)
    assert detail.unit_price == 12.5
    assert detail.category_id == 1
    assert detail.name == "Beef Skewer"
