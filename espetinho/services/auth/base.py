"""
Credential Verifier Abstract Base Class

Defines the interface used by the admin login endpoint. Order, product and
stock flows never depend on it, so the way identity is established can be
swapped without touching them.

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

from abc import ABC, abstractmethod


class BaseCredentialVerifier(ABC):
    """
    Abstract base class for admin credential checks.

    Implementations:
        - FixedCredentialVerifier: compares against the configured pair
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name of the verification backend (used in logs)."""
        pass

    @abstractmethod
    def verify(self, username: str, password: str) -> bool:
        """
        Check a username/password pair.

        Args:
            username: Submitted username
            password: Submitted password

        Returns:
            True when the pair is accepted
        """
        pass
