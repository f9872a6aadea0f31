# app/bot/services/commands.py
"""
Command service.

Business logic behind the owner's chat:
- classify the message into an intent
- apply the intent to the shop-info document (shallow merge)
- store it (right away, or after a "yes" when AUTO_APPLY is off)
- run the post-commit hooks and answer in the chat
"""

from html import escape
from typing import Awaitable, Callable, Iterable, Optional

import structlog

from app.bot.classifier import IntentClassifier
from app.bot.intents import (
    HoursRange,
    Intent,
    PushIntent,
    SetAddressIntent,
    SetBackgroundIntent,
    SetHoursBulkIntent,
    SetHoursIntent,
    SetNameIntent,
    SetWeeklyNoteIntent,
    UnknownIntent,
    parse_intent,
)
from app.bot.services.notifications import ChatNotifier
from app.hours import format_hours, parse_day_spec, set_day_hours
from app.models import DayHours, ShopInfo
from config.settings import Settings
from infrastructure.errors import InfoStoreError
from infrastructure.info_store import InfoStore
from infrastructure.pending_storage import PendingIntents

logger = structlog.get_logger()

PostCommitHook = Callable[[ShopInfo], Awaitable[None]]

CONFIRM_WORDS = {"yes", "y", "ok", "apply", "confirm"}
CANCEL_WORDS = {"no", "n", "cancel"}
CLEAR_NOTE_WORDS = {"", "clear", "none", "-"}

HELP_TEXT = (
    "🤔 I didn't get that.\n\n"
    "Try one of these:\n"
    "• <code>set hours Mon–Fri 09:00-18:00</code>\n"
    "• <code>set hours Sun closed</code>\n"
    "• <code>set address 45 Vinyl Ave, Helsinki</code>\n"
    "• <code>set name Nooti Coffee</code>\n"
    "• <code>set bg https://...</code>\n"
    "• <code>set note Live jazz on Friday</code>\n"
    "• <code>push</code>"
)

# ==========================================
# APPLYING INTENTS
# ==========================================

def _apply_range(hours: Iterable[DayHours], hours_range: HoursRange) -> list[DayHours]:
    days = parse_day_spec(hours_range.days)
    if not hours_range.closed and not (hours_range.open and hours_range.close):
        raise ValueError(f"Opening and closing time are needed for {hours_range.days}")
    return set_day_hours(
        hours,
        days,
        open=hours_range.open,
        close=hours_range.close,
        closed=hours_range.closed,
    )


def apply_intent(info: ShopInfo, intent: Intent) -> ShopInfo:
    """
    Return the document with the intent applied.

    Only the touched fields change. Raises ValueError for edits that
    can't be applied (unknown day names, missing times).
    """
    if isinstance(intent, SetHoursIntent):
        return info.model_copy(update={"hours": _apply_range(info.hours, intent)})

    if isinstance(intent, SetHoursBulkIntent):
        hours = list(info.hours)
        for hours_range in intent.ranges:
            hours = _apply_range(hours, hours_range)
        return info.model_copy(update={"hours": hours})

    if isinstance(intent, SetAddressIntent):
        return info.model_copy(update={
            "address": intent.address.strip() or info.address,
            "city": intent.city.strip() or info.city,
        })

    if isinstance(intent, SetNameIntent):
        if not intent.name.strip():
            raise ValueError("The name can't be empty")
        return info.model_copy(update={"name": intent.name.strip()})

    if isinstance(intent, SetBackgroundIntent):
        if not intent.url.strip():
            raise ValueError("The background needs an image URL")
        return info.model_copy(update={"background_url": intent.url.strip()})

    if isinstance(intent, SetWeeklyNoteIntent):
        note = intent.note.strip()
        return info.model_copy(update={
            "weekly_note": None if note.lower() in CLEAR_NOTE_WORDS else note
        })

    raise ValueError(f"Nothing to apply for {intent.type}")


def describe_info(info: ShopInfo) -> str:
    """HTML summary of the document, as shown after a change."""
    lines = [
        f"<b>{escape(info.name)}</b>",
        f"📍 {escape(info.address)}, {escape(info.city)}",
        "",
        "🕘 <b>Opening hours</b>",
    ]
    lines.extend(escape(line) for line in format_hours(info.hours))
    if info.weekly_note:
        lines.extend(["", f"📝 {escape(info.weekly_note)}"])
    return "\n".join(lines)

# ==========================================
# SERVICE
# ==========================================

class CommandService:
    """Handles one owner message at a time."""

    def __init__(
        self,
        settings: Settings,
        store: InfoStore,
        classifier: IntentClassifier,
        notifier: ChatNotifier,
        pending: PendingIntents,
        hooks: Optional[list[PostCommitHook]] = None,
    ):
        self.settings = settings
        self.store = store
        self.classifier = classifier
        self.notifier = notifier
        self.pending = pending
        self.hooks = hooks or []

    async def handle(self, chat_id: int, text: str) -> None:
        """
        Process one message.

        Flow:
        1. Read the current document
        2. A waiting command + "yes"/"no" → apply or drop it
        3. Otherwise classify the text (current hours as context)
        4. unknown → help / conversational reply, nothing changes
        5. push → commit the current document to GitHub
        6. edits → write now (AUTO_APPLY) or keep as pending with a preview

        Storage errors propagate to the caller.
        """
        current = await self.store.read()
        word = text.strip().lower()

        waiting = await self.pending.get(chat_id)
        if waiting is not None and word in CONFIRM_WORDS | CANCEL_WORDS:
            await self.pending.clear(chat_id)
            if word in CANCEL_WORDS:
                logger.info("pending_intent_discarded", chat_id=chat_id)
                await self.notifier.send(chat_id, "🗑️ Discarded, nothing changed.")
                return
            await self._apply(chat_id, current, parse_intent(waiting), confirmed=True)
            return

        intent = await self.classifier.classify(text, context=current.hours)
        logger.info("intent_classified", chat_id=chat_id, type=intent.type)

        if isinstance(intent, UnknownIntent):
            await self.notifier.send(chat_id, escape(intent.reply) if intent.reply else HELP_TEXT)
            return

        if isinstance(intent, PushIntent):
            await self._push(chat_id, current)
            return

        await self._apply(chat_id, current, intent, confirmed=self.settings.auto_apply)

    async def _apply(self, chat_id: int, current: ShopInfo, intent: Intent, confirmed: bool) -> None:
        try:
            next_info = apply_intent(current, intent)
        except ValueError as e:
            logger.warning("intent_rejected", chat_id=chat_id, type=intent.type, error=str(e))
            await self.notifier.send(chat_id, f"⚠️ {escape(str(e))}")
            return

        if not confirmed:
            await self.pending.put(chat_id, intent.model_dump())
            await self.notifier.send(
                chat_id,
                "👀 <b>Preview</b>\n\n"
                f"{describe_info(next_info)}\n\n"
                "Reply <b>yes</b> to apply or <b>no</b> to cancel.",
            )
            return

        await self.commit(chat_id, next_info)

    async def commit(self, chat_id: int, next_info: ShopInfo) -> ShopInfo:
        """
        Write the document, push it to the mirror, then run every post-commit hook.

        Only the local write has to succeed. A failed mirror push is reported
        to the owner and re-raised after the hooks have run.
        """
        stored = await self.store.save_local(next_info)
        logger.info("info_updated", chat_id=chat_id)

        mirror_error = None
        if self.settings.mirror_writable:
            try:
                await self.store.push(stored)
            except InfoStoreError as e:
                logger.error("mirror_push_failed", chat_id=chat_id, error=str(e))
                mirror_error = e

        await self._run_hooks(stored)

        if mirror_error is not None:
            await self.notifier.send(
                chat_id,
                "⚠️ <b>Saved locally</b>, but the GitHub mirror update failed:\n"
                f"<code>{escape(str(mirror_error))}</code>\n\n"
                f"{describe_info(stored)}",
            )
            raise mirror_error

        await self.notifier.send(chat_id, f"✅ <b>Saved</b>\n\n{describe_info(stored)}")
        return stored

    async def _run_hooks(self, stored: ShopInfo) -> None:
        for hook in self.hooks:
            try:
                await hook(stored)
            except Exception as e:
                logger.error(
                    "post_commit_hook_failed",
                    hook=getattr(hook, "name", repr(hook)),
                    error=str(e),
                )

    async def _push(self, chat_id: int, current: ShopInfo) -> None:
        if not self.settings.mirror_writable:
            await self.notifier.send(
                chat_id,
                "⚠️ GitHub mirror isn't configured (GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO).",
            )
            return

        try:
            await self.store.push(current)
        except InfoStoreError as e:
            await self.notifier.send(chat_id, f"⚠️ GitHub push failed: <code>{escape(str(e))}</code>")
            raise
        logger.info("info_pushed", chat_id=chat_id)
        await self.notifier.send(chat_id, "📤 Pushed the current info to GitHub.")
