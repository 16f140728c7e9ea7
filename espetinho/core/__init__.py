"""
Core module initialization.
Exports configuration, logging utilities and the domain error taxonomy.
"""

from espetinho.core.config import get_settings, Settings, EnvironmentMode
from espetinho.core.exceptions import (
    EspetinhoError,
    ValidationError,
    NotFoundError,
    TransactionError,
    DegradedPathError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "EspetinhoError",
    "ValidationError",
    "NotFoundError",
    "TransactionError",
    "DegradedPathError",
]
