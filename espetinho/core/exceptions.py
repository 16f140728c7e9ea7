"""
Domain Exceptions

Error taxonomy shared by the entity managers and the HTTP layer:

    - ValidationError: malformed or out-of-range input, raised before any write
    - NotFoundError: the targeted id does not resolve to an existing row
    - TransactionError: a multi-statement write failed and was rolled back
    - DegradedPathError: customer resolution failed during order creation;
      caught by the order manager, which proceeds without a customer

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

from typing import Iterable


class EspetinhoError(Exception):
    """Base class for all domain errors."""


class ValidationError(EspetinhoError):
    """
    Input rejected by a business rule.

    Attributes:
        errors: One human-readable message per violated rule
    """

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(EspetinhoError):
    """The requested row does not exist."""

    def __init__(self, message: str = "Recurso não encontrado"):
        self.message = message
        super().__init__(message)


class TransactionError(EspetinhoError):
    """A logical unit of work failed and every statement in it was rolled back."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Falha ao {operation}")


class DegradedPathError(EspetinhoError):
    """Customer resolution failed; the order may continue without a customer."""
