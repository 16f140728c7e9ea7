"""
Credential Verifier Factory

Single entry point for the admin login check.

Usage:
    from espetinho.services.auth import get_credential_verifier

    verifier = get_credential_verifier()
    if verifier.verify(username, password):
        ...

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

import logging
from functools import lru_cache

from espetinho.core.config import get_settings
from espetinho.services.auth.base import BaseCredentialVerifier
from espetinho.services.auth.fixed import FixedCredentialVerifier

logger = logging.getLogger(__name__)


@lru_cache()
def get_credential_verifier() -> BaseCredentialVerifier:
    """
    Get the configured credential verifier.

    The instance is cached; call ``reset_credential_verifier()`` after
    changing the admin settings.

    Returns:
        BaseCredentialVerifier: Verifier built from the current settings
    """
    settings = get_settings()
    if settings.is_production and settings.admin_password == "1234":
        logger.warning("Admin panel is using the default password in production")
    logger.info("Credential Verifier: Using FixedCredentialVerifier")
    return FixedCredentialVerifier(settings.admin_username, settings.admin_password)


def reset_credential_verifier() -> None:
    """Clear the cached verifier so the next call rebuilds it."""
    get_credential_verifier.cache_clear()
    logger.debug("Credential verifier cache cleared")


__all__ = [
    "get_credential_verifier",
    "reset_credential_verifier",
    "BaseCredentialVerifier",
    "FixedCredentialVerifier",
]
