"""Calendar Grid — month view arithmetic for the date-picker and booking calendar.

Invariants:
    - Weeks start on Sunday; leading cells before day 1 are blank (None)
    - A day is disabled when it is before min_date (default: today) or after max_date
    - Selecting a disabled day never changes the bound value
    - All functions are pure: "today" is always passed in
"""

import calendar
from dataclasses import dataclass
from datetime import date

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_HEADERS = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


@dataclass(frozen=True)
class CalendarMonth:
    """The month currently shown by a calendar widget."""
    year: int
    month: int  # 1-12

    @classmethod
    def containing(cls, day: date) -> "CalendarMonth":
        return cls(day.year, day.month)

    @classmethod
    def parse(cls, value: str | None, fallback: date) -> "CalendarMonth":
        """Parse the ?month=YYYY-MM query parameter, falling back to fallback's month."""
        if value:
            try:
                year_str, month_str = value.split("-", 1)
                year, month = int(year_str), int(month_str)
                if 1 <= month <= 12 and 1 <= year <= 9999:
                    return cls(year, month)
            except ValueError:
                pass
        return cls.containing(fallback)

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_weekday(self) -> int:
        """Weekday of day 1 with Sunday = 0."""
        return (date(self.year, self.month, 1).weekday() + 1) % 7

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    def previous(self) -> "CalendarMonth":
        if self.month == 1:
            return CalendarMonth(self.year - 1, 12)
        return CalendarMonth(self.year, self.month - 1)

    def next(self) -> "CalendarMonth":
        if self.month == 12:
            return CalendarMonth(self.year + 1, 1)
        return CalendarMonth(self.year, self.month + 1)


@dataclass(frozen=True)
class DayCell:
    day: int
    iso: str
    is_selected: bool
    is_today: bool
    is_disabled: bool


def parse_iso_date(value: str | date | None) -> date | None:
    """Accept YYYY-MM-DD or a full ISO timestamp; anything else is None."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def is_date_disabled(
    day: date,
    today: date,
    min_date: str | date | None = None,
    max_date: str | date | None = None,
) -> bool:
    effective_min = parse_iso_date(min_date) or today
    if day < effective_min:
        return True
    upper = parse_iso_date(max_date)
    if upper is not None and day > upper:
        return True
    return False


def build_month_grid(
    view: CalendarMonth,
    today: date,
    selected: str | date | None = None,
    min_date: str | date | None = None,
    max_date: str | date | None = None,
) -> list[DayCell | None]:
    """Flat list of cells, 7 per row; None for blank leading cells."""
    chosen = parse_iso_date(selected)
    cells: list[DayCell | None] = [None] * view.first_weekday
    for day_number in range(1, view.days_in_month + 1):
        day = date(view.year, view.month, day_number)
        cells.append(DayCell(
            day=day_number,
            iso=day.isoformat(),
            is_selected=chosen == day,
            is_today=today == day,
            is_disabled=is_date_disabled(day, today, min_date, max_date),
        ))
    return cells


def grid_weeks(cells: list[DayCell | None]) -> list[list[DayCell | None]]:
    """Split a flat grid into rows of 7, padding the last row."""
    padded = cells + [None] * (-len(cells) % 7)
    return [padded[i:i + 7] for i in range(0, len(padded), 7)]


def select_day(
    view: CalendarMonth,
    day_number: int,
    today: date,
    current: str | None = None,
    min_date: str | date | None = None,
    max_date: str | date | None = None,
) -> str | None:
    """New bound value after clicking a day; unchanged when the day is disabled."""
    if not 1 <= day_number <= view.days_in_month:
        return current
    day = date(view.year, view.month, day_number)
    if is_date_disabled(day, today, min_date, max_date):
        return current
    return day.isoformat()


def format_display_date(value: str | date | None) -> str:
    day = parse_iso_date(value)
    if day is None:
        return "Select date"
    return f"{MONTH_NAMES[day.month - 1]} {day.day}, {day.year}"


def group_by_day(
    entries: list[dict], view: CalendarMonth, date_key: str = "check_in_date",
) -> dict[int, list[dict]]:
    """Bucket calendar entries (e.g. bookings) by day number within the view month."""
    buckets: dict[int, list[dict]] = {}
    for entry in entries:
        day = parse_iso_date(entry.get(date_key))
        if day is None or (day.year, day.month) != (view.year, view.month):
            continue
        buckets.setdefault(day.day, []).append(entry)
    return buckets
