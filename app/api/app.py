# app/api/app.py
"""
FastAPI application.

create_app() wires everything together from one Settings object:
info store → classifier → command service → routers.
Tests pass their own store / command service instead.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
import structlog

from app.api.info import router as info_router
from app.api.webhooks.telegram import router as telegram_router
from app.bot.classifier import build_classifier
from app.bot.services.commands import CommandService
from app.bot.services.hooks import DeployHook
from app.bot.services.notifications import ChatNotifier
from config.settings import Settings
from infrastructure.info_store import InfoStore
from infrastructure.pending_storage import PendingIntents, bot_id_from_token, build_storage

logger = structlog.get_logger()


def build_command_service(settings: Settings, store: InfoStore) -> CommandService:
    """Command service with the collaborators chosen by the settings."""
    return CommandService(
        settings=settings,
        store=store,
        classifier=build_classifier(settings),
        notifier=ChatNotifier(settings.bot_token),
        pending=PendingIntents(
            build_storage(settings),
            bot_id=bot_id_from_token(settings.bot_token)
        ),
        hooks=[DeployHook(settings.deploy_hook_url)],
    )


def create_app(
    settings: Settings,
    store: Optional[InfoStore] = None,
    commands: Optional[CommandService] = None,
) -> FastAPI:
    store = store or InfoStore(settings)
    commands = commands or build_command_service(settings, store)

    # ==========================================
    # 🔄 LIFESPAN
    # ==========================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "app_startup",
            info_file=str(store.path),
            serverless=settings.is_serverless,
            mirror=settings.mirror_configured,
        )
        try:
            yield
        finally:
            logger.info("app_shutdown")
            try:
                await commands.notifier.close()
                await commands.pending.close()
            except Exception as e:
                logger.error("app_shutdown_error", error=str(e))

    app = FastAPI(
        title="Nooti Coffee API",
        description="Landing page data + Telegram webhook for the shop owner",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.commands = commands

    # ==========================================
    # ENDPOINT: Health check
    # ==========================================

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "service": "nooti_bot"
        }

    app.include_router(info_router)
    app.include_router(telegram_router)

    return app
