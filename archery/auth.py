"""Shared-secret admin gate."""

import hmac
import logging
from typing import Optional

from .config import get_admin_password

logger = logging.getLogger('archery.auth')


def check_admin_password(password: Optional[str], expected: Optional[str] = None) -> bool:
    """
    Check a password against the admin secret.

    Args:
        password: Password supplied by the user
        expected: Secret to compare with (defaults to the configured one)

    Returns:
        True if the password matches. An unset secret never matches.
    """
    if expected is None:
        expected = get_admin_password()
    if not password or not expected:
        return False

    ok = hmac.compare_digest(password.encode('utf-8'), expected.encode('utf-8'))
    if not ok:
        logger.warning('Rejected admin login: incorrect password')
    return ok
