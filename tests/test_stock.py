import pytest

from espetinho.core.exceptions import NotFoundError, ValidationError
from espetinho.models import StockItem
from espetinho.schemas import StockCreate
from espetinho.services import StockManager


async def test_create_and_get_standalone_row(session):
    manager = StockManager(session)

    created = await manager.create(StockCreate(description="Carvão 5kg", category_id=3, available=True))
    fetched = await manager.get(created.id)

    assert fetched.description == "Carvão 5kg"
    assert fetched.category_name == "INSUMOS"
    assert fetched.available is True


async def test_create_rejects_short_description_and_bad_category(session):
    with pytest.raises(ValidationError) as exc:
        await StockManager(session).create(StockCreate(description="ab", category_id=0))

    assert len(exc.value.errors) == 2


async def test_update_and_unknown_row(session):
    manager = StockManager(session)
    created = await manager.create(StockCreate(description="Carvão 5kg", category_id=3))

    changed = await manager.update(created.id, StockCreate(description="Carvão 10kg", category_id=3, available=True))

    assert changed == 1
    assert (await manager.get(created.id)).description == "Carvão 10kg"
    with pytest.raises(NotFoundError):
        await manager.update(999, StockCreate(description="Carvão", category_id=3))


async def test_delete_blocked_while_product_uses_row(session, beef_skewer):
    manager = StockManager(session)

    assert await manager.is_used_in_products(beef_skewer.stock_id)
    with pytest.raises(ValidationError):
        await manager.delete(beef_skewer.stock_id)
    assert await session.get(StockItem, beef_skewer.stock_id) is not None


async def test_delete_standalone_row(session):
    manager = StockManager(session)
    created = await manager.create(StockCreate(description="Sal grosso", category_id=3))

    assert await manager.delete(created.id) == 1
    with pytest.raises(NotFoundError):
        await manager.delete(created.id)


async def test_available_by_category(session):
    manager = StockManager(session)
    await manager.create(StockCreate(description="Espeto de Frango", category_id=1, available=True))
    await manager.create(StockCreate(description="Espeto de Coração", category_id=1, available=False))
    await manager.create(StockCreate(description="Guaraná", category_id=2, available=True))

    rows = await manager.available_by_category(1)

    assert [r.description for r in rows] == ["Espeto de Frango"]


async def test_list_includes_category_name(session, beef_skewer):
    rows = await StockManager(session).list()

    assert [(r.id, r.category_name) for r in rows] == [(beef_skewer.stock_id, "ESPETOS")]
