# app/bot/classifier.py
"""
🧠 INTENT CLASSIFIERS

Turn a free-text owner message into one Intent.

Two interchangeable implementations:
- PatternClassifier: fixed command grammar, no network
- OpenAIClassifier: asks an OpenAI chat model to return the intent as JSON

build_classifier() picks one from the settings (OPENAI_API_KEY set or not).
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from openai import AsyncOpenAI, OpenAIError
import structlog

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
from app.hours import format_hours
from app.models import DayHours
from config.settings import Settings

logger = structlog.get_logger()


class IntentClassifier(ABC):
    """classify(text, context) -> Intent"""

    @abstractmethod
    async def classify(self, text: str, context: Optional[Sequence[DayHours]] = None) -> Intent:
        ...

# ==========================================
# PATTERN CLASSIFIER
# ==========================================

HOURS_RE = re.compile(
    r"^(?P<days>.+?)\s+"
    r"(?:(?P<open>\d{2}:\d{2})\s*[-–]\s*(?P<close>\d{2}:\d{2})|(?P<closed>closed|off))$",
    re.IGNORECASE,
)


def _parse_range(part: str) -> Optional[HoursRange]:
    match = HOURS_RE.match(part.strip())
    if not match:
        return None
    if match.group("closed"):
        return HoursRange(days=match.group("days").strip(), closed=True)
    return HoursRange(
        days=match.group("days").strip(),
        open=match.group("open"),
        close=match.group("close"),
    )


class PatternClassifier(IntentClassifier):
    """
    Deterministic grammar (case-insensitive prefixes):

        set hours Mon–Fri 09:00-18:00
        set hours Sun closed
        set hours Mon–Fri 09:00-18:00; Sat 10:00-16:00; Sun closed
        set address 45 Vinyl Ave, Helsinki
        set name Nooti Coffee
        set bg https://...
        set note Live jazz on Friday
        push
    """

    async def classify(self, text: str, context: Optional[Sequence[DayHours]] = None) -> Intent:
        message = text.strip()
        lower = message.lower()

        if lower.startswith("set hours "):
            rest = message[len("set hours "):]
            ranges = []
            for part in rest.split(";"):
                if not part.strip():
                    continue
                parsed = _parse_range(part)
                if parsed is None:
                    return UnknownIntent()
                ranges.append(parsed)
            if not ranges:
                return UnknownIntent()
            if len(ranges) == 1:
                return SetHoursIntent(**ranges[0].model_dump())
            return SetHoursBulkIntent(ranges=ranges)

        if lower.startswith("set address "):
            rest = message[len("set address "):].strip()
            address, _, city = rest.partition(",")
            return SetAddressIntent(address=address.strip(), city=city.strip())

        if lower.startswith("set name "):
            return SetNameIntent(name=message[len("set name "):].strip())

        if lower.startswith("set bg "):
            return SetBackgroundIntent(url=message[len("set bg "):].strip())

        if lower.startswith("set note ") or lower == "set note":
            return SetWeeklyNoteIntent(note=message[len("set note"):].strip())

        if lower == "push":
            return PushIntent()

        return UnknownIntent()

# ==========================================
# OPENAI CLASSIFIER
# ==========================================

SYSTEM_PROMPT = """You convert short cafe owner messages into one structured command.
Return ONLY JSON matching one of these shapes:
{"type":"set_hours","days":"Mon–Fri","open":"09:00","close":"19:00"}
{"type":"set_hours","days":"Sun","closed":true}
{"type":"set_hours_bulk","ranges":[{"days":"Mon–Fri","open":"09:00","close":"18:00"},{"days":"Sat","closed":true}]}
{"type":"set_address","address":"45 Vinyl Ave","city":"Helsinki"}
{"type":"set_name","name":"Nooti Coffee"}
{"type":"set_bg","url":"https://..."}
{"type":"set_note","note":"Live jazz on Friday evening"}
{"type":"push"}
Days are Mon, Tue, Wed, Thu, Fri, Sat, Sun or ranges like "Mon–Fri". Times are 24h HH:MM.
If the message isn't about these, return {"type":"unknown","reply":"<a short friendly answer>"}."""


class OpenAIClassifier(IntentClassifier):
    """Delegates classification to an OpenAI chat model (JSON response format)."""

    def __init__(self, api_key: str, model: str, client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def classify(self, text: str, context: Optional[Sequence[DayHours]] = None) -> Intent:
        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        if context:
            current = "\n".join(format_hours(context))
            messages.append({"role": "system", "content": f"Current opening hours:\n{current}"})
        messages.append({"role": "user", "content": text})

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=messages,
                response_format={"type": "json_object"},
            )
            content = completion.choices[0].message.content or "{}"
            data = json.loads(content)
        except (OpenAIError, IndexError, ValueError) as e:
            logger.error("classifier_failed", model=self.model, error=str(e))
            return UnknownIntent()

        intent = parse_intent(data)
        logger.info("message_classified", model=self.model, type=intent.type)
        return intent


def build_classifier(settings: Settings) -> IntentClassifier:
    """OpenAI when a key is configured, the fixed grammar otherwise."""
    if settings.openai_api_key:
        return OpenAIClassifier(settings.openai_api_key, settings.openai_model)
    return PatternClassifier()
