# tests/conftest.py
"""Shared fixtures: settings in a temp dir, a fake chat, an in-memory pending store."""

import pytest
from aiogram.fsm.storage.memory import MemoryStorage

from app.bot.classifier import PatternClassifier
from app.bot.services.commands import CommandService
from config.settings import Settings
from infrastructure.info_store import InfoStore
from infrastructure.pending_storage import PendingIntents

SECRET = "s3cret"
OWNER_CHAT = 4242


class FakeNotifier:
    """Collects outgoing chat messages instead of calling Telegram."""

    def __init__(self):
        self.messages = []

    async def send(self, chat_id, text):
        self.messages.append((chat_id, text))
        return True

    async def close(self):
        pass

    @property
    def last(self):
        return self.messages[-1][1]


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "data_dir": tmp_path / "data",
        "telegram_webhook_secret": SECRET,
        "bot_token": "",
        "github_token": "",
        "github_owner": "",
        "github_repo": "",
        "openai_api_key": "",
        "redis_url": "",
        "deploy_hook_url": "",
        "vercel": "",
        "serverless": False,
        "auto_apply": True,
        "admin_chat_ids": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def store(settings):
    return InfoStore(settings)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def pending():
    return PendingIntents(MemoryStorage())


@pytest.fixture
def service(settings, store, notifier, pending):
    return CommandService(
        settings=settings,
        store=store,
        classifier=PatternClassifier(),
        notifier=notifier,
        pending=pending,
    )
