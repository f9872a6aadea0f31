# infrastructure/github_content.py
"""
🐙 GITHUB CONTENT (remote mirror)

The shop-info document is mirrored into a GitHub repository so that a
serverless frontend (whose local disk is thrown away) can read it back.

- fetch_raw(): GET the raw file (raw.githubusercontent.com)
- get_file_sha(): current revision marker of the file (None if missing)
- write_file(): read the sha, then PUT the new base64 content with it,
  so GitHub rejects blind overwrites
"""

import base64
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx
import structlog

from config.settings import Settings
from infrastructure.errors import MirrorReadError, MirrorWriteError

logger = structlog.get_logger()


class GitHubContentClient:
    """Small client over the GitHub contents API for one file."""

    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        # An injected client is owned by the caller and stays open.
        if self._http is not None:
            yield self._http
            return
        async with httpx.AsyncClient() as client:
            yield client

    @property
    def _contents_url(self) -> str:
        s = self.settings
        return f"{s.github_api_url}/repos/{s.github_owner}/{s.github_repo}/contents/{s.github_path}"

    @property
    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.settings.github_token}",
            "Accept": "application/vnd.github+json",
        }

    # ==========================================
    # READ
    # ==========================================

    async def fetch_raw(self) -> Any:
        """Decoded JSON of the mirrored file."""
        url = self.settings.raw_file_url
        try:
            async with self._client() as client:
                response = await client.get(url, headers={"Cache-Control": "no-cache"})
        except httpx.HTTPError as e:
            raise MirrorReadError(0, str(e)) from e

        if response.status_code != 200:
            raise MirrorReadError(response.status_code, response.text[:200])

        try:
            data = response.json()
        except ValueError as e:
            raise MirrorReadError(response.status_code, f"invalid JSON: {e}")

        logger.info("mirror_fetched", url=url)
        return data

    async def get_file_sha(self) -> Optional[str]:
        """Revision marker of the file on the branch, None when it doesn't exist yet."""
        try:
            async with self._client() as client:
                response = await client.get(
                    self._contents_url,
                    params={"ref": self.settings.github_branch},
                    headers=self._headers,
                )
        except httpx.HTTPError as e:
            raise MirrorReadError(0, str(e)) from e

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise MirrorReadError(response.status_code, response.text[:200])

        return response.json().get("sha") or None

    # ==========================================
    # WRITE
    # ==========================================

    async def write_file(self, content: str, message: str) -> None:
        """
        Commit `content` to the mirrored path.

        Flow:
        1. Read the current sha (optimistic-concurrency token)
        2. PUT base64 content + sha on the configured branch
        3. Non-2xx or transport failure → MirrorWriteError (status 0 when
           GitHub never answered)
        """
        sha = await self.get_file_sha()

        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self.settings.github_branch,
        }
        if sha:
            body["sha"] = sha

        try:
            async with self._client() as client:
                response = await client.put(
                    self._contents_url,
                    json=body,
                    headers=self._headers,
                )
        except httpx.HTTPError as e:
            logger.error("mirror_write_failed", status=0, path=self.settings.github_path, error=str(e))
            raise MirrorWriteError(0, str(e)) from e

        if not response.is_success:
            logger.error(
                "mirror_write_failed",
                status=response.status_code,
                path=self.settings.github_path,
            )
            raise MirrorWriteError(response.status_code, response.text)

        logger.info(
            "mirror_written",
            path=self.settings.github_path,
            branch=self.settings.github_branch,
            had_sha=bool(sha),
        )
