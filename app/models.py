# app/models.py
"""
📊 DATA MODELS (pydantic)

The shape of the shop-info document:
- DayHours (opening hours of one day)
- ShopInfo (the whole persisted document)
- DayRangeGroup (consecutive days sharing one schedule, display only)

The document is stored as camelCase JSON (backgroundUrl, weeklyNote,
updatedAt), so every model dumps with `by_alias=True`.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ==========================================
# WEEK
# ==========================================

# Canonical week order, Monday first. Grouping and display iterate in this order.
DAY_KEYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

DEFAULT_BACKGROUND_URL = (
    "https://images.unsplash.com/photo-1504754524776-8f4f37790ca0"
    "?auto=format&fit=crop&w=1600&q=60"
)

# ==========================================
# DAY HOURS
# ==========================================

class DayHours(BaseModel):
    """
    Opening hours of a single day.

    `day` is normally one of DAY_KEYS; labels migrated from unknown legacy
    groups are kept as they are. When `closed` is true, open/close are
    meaningless and usually absent.
    """

    day: str
    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False

    @property
    def is_open(self) -> bool:
        return not self.closed and bool(self.open) and bool(self.close)

# ==========================================
# SHOP INFO
# ==========================================

class ShopInfo(BaseModel):
    """The single shop-info document."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    address: str
    city: str
    hours: list[DayHours] = Field(default_factory=list)
    background_url: str = Field(alias="backgroundUrl")
    weekly_note: Optional[str] = Field(default=None, alias="weeklyNote")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def to_document(self) -> dict:
        """JSON-ready dict in the on-disk shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

# ==========================================
# DAY RANGE GROUP
# ==========================================

class DayRangeGroup(BaseModel):
    """
    A maximal run of consecutive days (Mon→Sun) with identical schedules.

    Built fresh for every render or preview, never persisted.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_day: str = Field(alias="from")
    to_day: str = Field(alias="to")
    closed: bool
    open: Optional[str] = None
    close: Optional[str] = None

    @property
    def label(self) -> str:
        if self.from_day == self.to_day:
            return self.from_day
        return f"{self.from_day}–{self.to_day}"

    @property
    def schedule(self) -> str:
        if self.closed:
            return "Closed"
        return f"{self.open} – {self.close}"


def default_info() -> ShopInfo:
    """Document used when nothing has been stored yet."""
    hours = [
        DayHours(day=day, open="08:00", close="18:00")
        for day in DAY_KEYS[:5]
    ]
    hours.append(DayHours(day="Sat", open="09:00", close="17:00"))
    hours.append(DayHours(day="Sun", open="10:00", close="16:00"))
    return ShopInfo(
        name="Nooti Coffee",
        address="123 Groove St",
        city="Helsinki",
        hours=hours,
        background_url=DEFAULT_BACKGROUND_URL,
    )
