# app/api/auth.py
"""
Shared-secret check for the webhook and the admin write endpoint.
"""

import hmac
from typing import Optional

from config.settings import Settings


def is_authorized(settings: Settings, provided: Optional[str]) -> bool:
    """
    True only if a secret is configured AND the provided one matches.

    TIMING-SAFE comparison (hmac.compare_digest).
    """
    expected = settings.telegram_webhook_secret
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())
