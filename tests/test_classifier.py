# tests/test_classifier.py
import json
from types import SimpleNamespace

import pytest
from openai import APIConnectionError
import httpx

from app.bot.classifier import OpenAIClassifier, PatternClassifier, build_classifier
from app.bot.intents import (
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
from app.models import default_info

from tests.conftest import make_settings

# ==========================================
# PATTERN CLASSIFIER
# ==========================================

@pytest.mark.parametrize("text, expected", [
    ("set hours Mon–Fri 09:00-19:00",
     SetHoursIntent(days="Mon–Fri", open="09:00", close="19:00")),
    ("Set Hours sat 10:00–16:00",
     SetHoursIntent(days="sat", open="10:00", close="16:00")),
    ("set hours Sun closed", SetHoursIntent(days="Sun", closed=True)),
    ("set address 45 Vinyl Ave, Helsinki",
     SetAddressIntent(address="45 Vinyl Ave", city="Helsinki")),
    ("set address 45 Vinyl Ave", SetAddressIntent(address="45 Vinyl Ave", city="")),
    ("set name  Nooti Coffee ", SetNameIntent(name="Nooti Coffee")),
    ("set bg https://cdn.pixabay.com/bg.jpg", SetBackgroundIntent(url="https://cdn.pixabay.com/bg.jpg")),
    ("set note Live jazz on Friday", SetWeeklyNoteIntent(note="Live jazz on Friday")),
    ("set note", SetWeeklyNoteIntent(note="")),
    ("PUSH", PushIntent()),
])
async def test_pattern_grammar(text, expected):
    assert await PatternClassifier().classify(text) == expected


async def test_pattern_bulk_hours():
    intent = await PatternClassifier().classify(
        "set hours Mon–Fri 09:00-18:00; Sat 10:00-16:00; Sun closed"
    )

    assert isinstance(intent, SetHoursBulkIntent)
    assert [r.days for r in intent.ranges] == ["Mon–Fri", "Sat", "Sun"]
    assert intent.ranges[2].closed


@pytest.mark.parametrize("text", [
    "hello there",
    "set hours Mon 9-5",
    "set hours Mon–Fri 09:00-18:00; nonsense",
    "pushing it",
    "set notes for today",
])
async def test_pattern_unknown(text):
    assert isinstance(await PatternClassifier().classify(text), UnknownIntent)

# ==========================================
# OPENAI CLASSIFIER
# ==========================================

class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


async def test_openai_result_becomes_intent():
    completions = FakeCompletions(json.dumps(
        {"type": "set_hours", "days": "Sat", "open": "10:00", "close": "14:00"}
    ))
    classifier = OpenAIClassifier("key", "gpt-4o-mini", client=fake_client(completions))

    intent = await classifier.classify("we open 10 to 2 on saturday", context=default_info().hours)

    assert intent == SetHoursIntent(days="Sat", open="10:00", close="14:00")
    call = completions.calls[0]
    assert call["temperature"] == 0
    assert call["response_format"] == {"type": "json_object"}
    assert "Mon–Fri: 08:00 – 18:00" in call["messages"][1]["content"]
    assert call["messages"][-1] == {"role": "user", "content": "we open 10 to 2 on saturday"}


async def test_openai_chat_reply_is_kept():
    completions = FakeCompletions(json.dumps({"type": "unknown", "reply": "Hi! Coffee?"}))
    classifier = OpenAIClassifier("key", "gpt-4o-mini", client=fake_client(completions))

    assert await classifier.classify("hi") == UnknownIntent(reply="Hi! Coffee?")


@pytest.mark.parametrize("content", ["not json", json.dumps({"type": "launch_rocket"}), None])
async def test_openai_bad_output_is_unknown(content):
    classifier = OpenAIClassifier("key", "m", client=fake_client(FakeCompletions(content)))

    assert isinstance(await classifier.classify("?"), UnknownIntent)


async def test_openai_network_error_is_unknown():
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
    classifier = OpenAIClassifier("key", "m", client=fake_client(FakeCompletions(error=error)))

    assert isinstance(await classifier.classify("set name X"), UnknownIntent)


def test_build_classifier_by_settings(tmp_path):
    assert isinstance(build_classifier(make_settings(tmp_path)), PatternClassifier)
    assert isinstance(
        build_classifier(make_settings(tmp_path, openai_api_key="sk-test")),
        OpenAIClassifier,
    )


def test_parse_intent_rejects_garbage():
    assert isinstance(parse_intent({"type": "set_name"}), UnknownIntent)
    assert isinstance(parse_intent("push"), UnknownIntent)
