from datetime import datetime, timedelta, timezone
from decimal import Decimal

from espetinho.models import Order, OrderStatus
from espetinho.services import StatisticsAggregator


def add_order(session, total, age):
    session.add(
        Order(
            created_at=datetime.now(timezone.utc) - age,
            status=OrderStatus.PENDING,
            total=Decimal(total),
        )
    )


async def test_no_orders_gives_zero_not_null(session):
    stats = await StatisticsAggregator(session).compute()

    assert stats.order_count == 0
    assert stats.revenue == Decimal("0.00")
    assert stats.computed_at.tzinfo is not None


async def test_counts_only_the_trailing_window(session):
    add_order(session, "25.00", timedelta(hours=1))
    add_order(session, "10.50", timedelta(hours=23))
    add_order(session, "99.99", timedelta(hours=25))
    add_order(session, "40.00", timedelta(days=3))
    await session.commit()

    stats = await StatisticsAggregator(session).compute()

    assert stats.order_count == 2
    assert stats.revenue == Decimal("35.50")
    assert stats.window_hours == 24


async def test_explicit_now_moves_the_window(session):
    add_order(session, "25.00", timedelta(hours=30))
    await session.commit()

    earlier = datetime.now(timezone.utc) - timedelta(hours=12)
    stats = await StatisticsAggregator(session).compute(now=earlier)

    assert stats.order_count == 1
    assert stats.computed_at == earlier


async def test_custom_window(session):
    add_order(session, "25.00", timedelta(hours=30))
    add_order(session, "5.00", timedelta(hours=1))
    await session.commit()

    stats = await StatisticsAggregator(session, window_hours=48).compute()

    assert stats.order_count == 2
    assert stats.revenue == Decimal("30.00")
