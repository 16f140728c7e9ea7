"""
Statistics Aggregator

Dashboard figures over a trailing window (24 hours by default), recomputed
on every call.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from espetinho.core.config import get_settings
from espetinho.models import Order

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass
class Statistics:
    """
    Aggregated figures for one window.

    Attributes:
        order_count: Orders created inside the window
        revenue: Sum of their totals (0.00 when there are none)
        computed_at: Upper bound of the window
        window_hours: Window length
    """
    order_count: int
    revenue: Decimal
    computed_at: datetime
    window_hours: int


class StatisticsAggregator:
    """
    Computes order count and revenue since ``now - window``.

    Args:
        session: Session owned by the current request
        window_hours: Window length; defaults to ``statistics_window_hours``
    """

    def __init__(self, session: AsyncSession, window_hours: Optional[int] = None):
        self.session = session
        self.window_hours = window_hours or get_settings().statistics_window_hours

    async def compute(self, now: Optional[datetime] = None) -> Statistics:
        """
        Count and sum the orders created at or after ``now - window``.

        Args:
            now: Upper bound of the window (defaults to the current UTC time;
                naive values are taken as UTC)

        Returns:
            Statistics with ``order_count`` 0 and ``revenue`` 0.00 when no
            order matches
        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        else:
            now = now.astimezone(timezone.utc)

        lower_bound = now - timedelta(hours=self.window_hours)
        result = await self.session.execute(
            select(
                func.count(Order.id),
                func.coalesce(func.sum(Order.total), 0),
            ).where(Order.created_at >= lower_bound)
        )
        count, total = result.one()

        stats = Statistics(
            order_count=int(count or 0),
            revenue=Decimal(str(total or 0)).quantize(CENTS),
            computed_at=now,
            window_hours=self.window_hours,
        )
        logger.debug(
            f"Statistics since {lower_bound.isoformat()}: "
            f"{stats.order_count} order(s), revenue {stats.revenue}"
        )
        return stats
