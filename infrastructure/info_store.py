# infrastructure/info_store.py
"""
🗂️ INFO STORE

Owns the single shop-info document.

Read:
- on a serverless host with a configured mirror → raw file from GitHub
- otherwise (or when GitHub fails) → local JSON file, seeded with the
  default document on first use
- every document goes through normalize_info, so callers always get the
  canonical per-day hours whichever generation wrote the file

Write:
- always the local file (stamped with updatedAt)
- then, if GITHUB_TOKEN is set, the same document is pushed to the mirror;
  a failed push raises after the local file is already written

No locking: concurrent writers race and the last one wins.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Optional

import structlog

from app.hours import normalize_info
from app.models import ShopInfo, default_info
from config.settings import Settings
from infrastructure.errors import InfoStoreError
from infrastructure.github_content import GitHubContentClient

logger = structlog.get_logger()


def serialize_info(info: ShopInfo) -> str:
    """Pretty-printed UTF-8 JSON, the on-disk and mirrored format."""
    return json.dumps(info.to_document(), indent=2, ensure_ascii=False)


class InfoStore:
    """Local JSON cache + optional GitHub mirror of the shop-info document."""

    def __init__(self, settings: Settings, mirror: Optional[GitHubContentClient] = None):
        self.settings = settings
        self.path = settings.info_file
        self.mirror = mirror or GitHubContentClient(settings)

    # ==========================================
    # LOCAL FILE
    # ==========================================

    def ensure_seed(self) -> None:
        """Create the data directory and the default document if missing."""
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(serialize_info(default_info()), encoding="utf-8")
        logger.info("info_seeded", path=str(self.path))

    def _read_local(self) -> ShopInfo:
        self.ensure_seed()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.error("info_file_corrupt", path=str(self.path), error=str(e))
            raw = None
        return normalize_info(raw)

    def _write_local(self, info: ShopInfo) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(serialize_info(info), encoding="utf-8")

    # ==========================================
    # READ
    # ==========================================

    async def read(self) -> ShopInfo:
        """Current document in canonical shape."""
        if self.settings.is_serverless and self.settings.mirror_configured:
            try:
                raw = await self.mirror.fetch_raw()
                return normalize_info(raw)
            except InfoStoreError as e:
                logger.warning("mirror_read_failed", error=str(e), fallback=str(self.path))

        return await asyncio.to_thread(self._read_local)

    # ==========================================
    # WRITE
    # ==========================================

    async def save_local(self, info: ShopInfo) -> ShopInfo:
        """Stamp `info` with updatedAt and write it to the local file only."""
        stamped = info.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        await asyncio.to_thread(self._write_local, stamped)
        logger.info("info_written", path=str(self.path), name=stamped.name)
        return stamped

    async def write(self, info: ShopInfo) -> ShopInfo:
        """
        Persist `info` and return the stamped document.

        The local write is the guarantee of this call. The mirror push runs
        afterwards and its errors propagate to the caller.
        """
        stamped = await self.save_local(info)

        if self.settings.mirror_writable:
            await self.push(stamped)

        return stamped

    async def push(self, info: ShopInfo, message: Optional[str] = None) -> bool:
        """
        Commit `info` to the GitHub mirror.

        Returns False (and does nothing) when no write credential is configured.
        """
        if not self.settings.mirror_writable:
            logger.warning("mirror_push_skipped", reason="GITHUB_TOKEN or repository not set")
            return False

        if message is None:
            stamp = datetime.now(timezone.utc).isoformat()
            message = f"chore: update shop info via Telegram {stamp}"

        await self.mirror.write_file(serialize_info(info), message)
        return True
