# app/bot/services/hooks.py
"""
Post-commit hooks.

Run in order after the document has been written locally. Each one may
fail on its own; a failure is logged and never undoes the write.
"""

from typing import Optional

import httpx
import structlog

from app.models import ShopInfo

logger = structlog.get_logger()


class DeployHook:
    """Fire-and-forget POST to the hosting platform's deploy hook."""

    name = "deploy_hook"

    def __init__(self, url: str, http: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._http = http

    async def __call__(self, info: ShopInfo) -> None:
        if not self.url:
            return

        try:
            if self._http is not None:
                response = await self._http.post(self.url)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url)
            logger.info("deploy_hook_triggered", status=response.status_code)
        except httpx.HTTPError as e:
            # Deploy hook is optional, the change is already stored
            logger.warning("deploy_hook_failed", error=str(e))
