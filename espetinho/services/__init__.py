"""
                        Services Module

Entity managers for the order-and-inventory model. Each manager receives
the request's AsyncSession at construction and composes one generic
Repository per table it touches.

Services:
    - catalog: ProductManager (product/stock pairs), StockManager
    - orders: OrderManager (orders, items, statuses)
    - customers: CustomerDirectory (find-or-create by phone)
    - categories: CategoryRegistry (fixed category set)
    - statistics: StatisticsAggregator (trailing-window figures)
    - auth: admin credential verification
"""

from espetinho.services.catalog import ProductManager, StockManager
from espetinho.services.categories import CategoryRegistry
from espetinho.services.customers import CustomerDirectory
from espetinho.services.orders import OrderManager
from espetinho.services.repository import Repository
from espetinho.services.statistics import Statistics, StatisticsAggregator

__all__ = [
    "ProductManager",
    "StockManager",
    "CategoryRegistry",
    "CustomerDirectory",
    "OrderManager",
    "Repository",
    "Statistics",
    "StatisticsAggregator",
]
