from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
import datetime
from enum import Enum
import utils


class Color(str, Enum):
    GRAY = "#1f2937"
    RED = "#dc2626"
    ORANGE = "#ea580c"
    YELLOW = "#d97706"
    GREEN = "#16a34a"
    CYAN = "#0891b2"
    BLUE = "#2563eb"
    PURPLE = "#7c3aed"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class View(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class CamelModel(BaseModel):
    """Base model speaking camelCase on the wire, snake_case in python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _EventInput(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("start_time", "end_time", mode="after", check_fields=False)
    @classmethod
    def _times_to_utc(cls, value):
        return utils.to_utc(value) if value is not None else None

    @field_validator("recurrence_end", mode="before", check_fields=False)
    @classmethod
    def _parse_recurrence_end(cls, value):
        # The event form sends "" when no end date was picked
        if value is None or value == "":
            return None
        parsed = utils.parse_date_value(value)
        if parsed is None:
            raise ValueError(f"Invalid recurrence end date: {value}")
        return parsed

    @field_validator("recurrence_pattern", mode="before", check_fields=False)
    @classmethod
    def _empty_pattern(cls, value):
        return None if value == "" else value


class EventCreate(_EventInput):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_time: datetime.datetime
    end_time: datetime.datetime
    location: Optional[str] = None
    color: Color = Color.GRAY
    all_day: bool = False
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end: Optional[datetime.date] = None


class EventUpdate(_EventInput):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_time: Optional[datetime.datetime] = None
    end_time: Optional[datetime.datetime] = None
    location: Optional[str] = None
    color: Optional[Color] = None
    all_day: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end: Optional[datetime.date] = None


class Event(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    start_time: datetime.datetime
    end_time: datetime.datetime
    location: Optional[str] = None
    color: Color = Color.GRAY
    all_day: bool = False
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end: Optional[datetime.date] = None
    parent_event_id: Optional[int] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str


# View models, render-ready data for the calendar grids

class EventChip(CamelModel):
    event: Event
    text_color: str


class EventLayout(CamelModel):
    event: Event
    text_color: str
    column: int
    columns: int
    top: float
    height: float
    left: float
    width: float


class MonthDayCell(CamelModel):
    day: Optional[int] = None
    date: Optional[datetime.date] = None
    is_today: bool = False
    events: List[EventChip] = []
    more_count: int = 0


class MonthView(CamelModel):
    year: int
    month: int
    range_start: datetime.datetime
    range_end: datetime.datetime
    previous: datetime.date
    next: datetime.date
    weeks: List[List[MonthDayCell]]


class DayColumn(CamelModel):
    date: datetime.date
    is_today: bool = False
    events: List[EventLayout] = []


class WeekView(CamelModel):
    range_start: datetime.datetime
    range_end: datetime.datetime
    previous: datetime.date
    next: datetime.date
    days: List[DayColumn]


class DayView(CamelModel):
    range_start: datetime.datetime
    range_end: datetime.datetime
    previous: datetime.date
    next: datetime.date
    day: DayColumn


class MiniDayCell(CamelModel):
    day: Optional[int] = None
    date: Optional[datetime.date] = None
    is_today: bool = False
    is_selected: bool = False


class MiniCalendarView(CamelModel):
    year: int
    month: int
    previous: datetime.date
    next: datetime.date
    days: List[MiniDayCell]
