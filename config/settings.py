# config/settings.py
"""
Settings file - every option of the application lives here.

Flow: when the application starts it reads the environment (and an
optional .env file) and builds a `Settings` object with all values.

The object is passed explicitly into the info store, the command service
and the webhook router, so tests can build their own `Settings(...)`
without touching the process environment.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Main settings class.

    BaseSettings = pydantic class which:
    1. Reads the environment and the .env file
    2. Validates types (API_PORT must be int, AUTO_APPLY must be bool)
    3. Falls back to the defaults below for everything optional
    """

    # ==========================================
    # TELEGRAM BOT
    # ==========================================
    bot_token: str = ""
    telegram_webhook_secret: str = ""
    admin_chat_ids: str = ""  # "123,456"

    # ==========================================
    # REMOTE MIRROR (GitHub)
    # ==========================================
    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    github_branch: str = "main"
    github_path: str = "web/data/info.json"
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"

    # ==========================================
    # COMMANDS
    # ==========================================
    auto_apply: bool = True
    deploy_hook_url: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # ==========================================
    # STORAGE
    # ==========================================
    data_dir: Optional[Path] = None
    redis_url: str = ""

    # ==========================================
    # API
    # ==========================================
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ==========================================
    # ENVIRONMENT
    # ==========================================
    vercel: str = ""
    serverless: bool = False
    environment: Literal["development", "production"] = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def is_serverless(self) -> bool:
        """Network-hosted execution: local disk is ephemeral."""
        return bool(self.vercel) or self.serverless

    @property
    def info_file(self) -> Path:
        """Local on-disk copy of the shop-info document."""
        if self.data_dir is not None:
            base = Path(self.data_dir)
        elif self.is_serverless:
            base = Path("/tmp/data")
        else:
            base = Path.cwd() / "data"
        return base / "info.json"

    @property
    def admin_allowlist(self) -> set[int]:
        """Parsed ADMIN_CHAT_IDS; empty set means every chat is accepted."""
        ids = set()
        for chunk in self.admin_chat_ids.split(","):
            chunk = chunk.strip()
            if chunk:
                ids.add(int(chunk))
        return ids

    @property
    def mirror_configured(self) -> bool:
        return bool(self.github_owner and self.github_repo)

    @property
    def mirror_writable(self) -> bool:
        return self.mirror_configured and bool(self.github_token)

    @property
    def raw_file_url(self) -> str:
        """Raw-file URL of the mirrored document."""
        return (
            f"{self.github_raw_url}/{self.github_owner}/{self.github_repo}"
            f"/{self.github_branch}/{self.github_path}"
        )


config = Settings()
