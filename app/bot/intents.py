# app/bot/intents.py
"""
🎯 INTENTS

The closed set of things the owner can ask the bot to do.
Every classifier returns exactly one of these models.

JSON shapes (also used in the LLM prompt):
    {"type": "set_hours", "days": "Mon–Fri", "open": "09:00", "close": "19:00"}
    {"type": "set_hours", "days": "Sun", "closed": true}
    {"type": "set_hours_bulk", "ranges": [{"days": "Mon–Fri", ...}, ...]}
    {"type": "set_address", "address": "45 Vinyl Ave", "city": "Helsinki"}
    {"type": "set_name", "name": "Nooti Coffee"}
    {"type": "set_bg", "url": "https://..."}
    {"type": "set_note", "note": "Live jazz on Friday"}
    {"type": "push"}
    {"type": "unknown", "reply": "..."}
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError


class HoursRange(BaseModel):
    """Hours for a day label ("Sat", "Mon–Fri", "weekend")."""

    days: str
    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False


class SetHoursIntent(HoursRange):
    type: Literal["set_hours"] = "set_hours"


class SetHoursBulkIntent(BaseModel):
    type: Literal["set_hours_bulk"] = "set_hours_bulk"
    ranges: list[HoursRange]


class SetAddressIntent(BaseModel):
    type: Literal["set_address"] = "set_address"
    address: str = ""
    city: str = ""


class SetNameIntent(BaseModel):
    type: Literal["set_name"] = "set_name"
    name: str


class SetBackgroundIntent(BaseModel):
    type: Literal["set_bg"] = "set_bg"
    url: str


class SetWeeklyNoteIntent(BaseModel):
    type: Literal["set_note"] = "set_note"
    note: str = ""


class PushIntent(BaseModel):
    type: Literal["push"] = "push"


class UnknownIntent(BaseModel):
    type: Literal["unknown"] = "unknown"
    reply: Optional[str] = None


Intent = Annotated[
    Union[
        SetHoursIntent,
        SetHoursBulkIntent,
        SetAddressIntent,
        SetNameIntent,
        SetBackgroundIntent,
        SetWeeklyNoteIntent,
        PushIntent,
        UnknownIntent,
    ],
    Field(discriminator="type"),
]

intent_adapter = TypeAdapter(Intent)

MUTATING_TYPES = {"set_hours", "set_hours_bulk", "set_address", "set_name", "set_bg", "set_note"}


def parse_intent(data: Any) -> Intent:
    """Validate a decoded dict into an intent; anything invalid becomes unknown."""
    try:
        return intent_adapter.validate_python(data)
    except ValidationError:
        return UnknownIntent()
