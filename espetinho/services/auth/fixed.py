"""
Fixed Credential Verifier

Accepts a single username/password pair taken from the settings
(ADMIN_USERNAME / ADMIN_PASSWORD, default admin/1234).
"""

import logging
import secrets

from espetinho.services.auth.base import BaseCredentialVerifier

logger = logging.getLogger(__name__)


class FixedCredentialVerifier(BaseCredentialVerifier):
    """
    Compares submitted credentials against one configured pair.

    Example:
        >>> verifier = FixedCredentialVerifier("admin", "1234")
        >>> verifier.verify("admin", "1234")
        True
    """

    def __init__(self, username: str, password: str):
        self._username = username
        self._password = password

    @property
    def provider_name(self) -> str:
        return "fixed"

    def verify(self, username: str, password: str) -> bool:
        user_ok = secrets.compare_digest(username.encode(), self._username.encode())
        pass_ok = secrets.compare_digest(password.encode(), self._password.encode())
        if not (user_ok and pass_ok):
            logger.warning(f"Rejected admin login for user {username!r}")
        return user_ok and pass_ok
