from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from classcal.utils.time_parser import minute_of_day, parse_iso_date

# -----------------------------
# Data model
# -----------------------------
@dataclass(frozen=True)
class ClassEntry:
    """A class as submitted by the forms: every field except the id."""

    date: str              # YYYY-MM-DD
    start_time: str        # HH:MM
    end_time: str          # HH:MM
    class_name: str
    instructor: str
    description: str = ""

    @staticmethod
    def create(
        *,
        day: date,
        start_time: str,
        end_time: str,
        class_name: str,
        instructor: str,
        description: str = "",
    ) -> "ClassEntry":
        return ClassEntry(
            date=day.isoformat(),
            start_time=start_time.strip(),
            end_time=end_time.strip(),
            class_name=class_name.strip(),
            instructor=instructor.strip(),
            description=description.strip(),
        )

    def to_payload(self) -> dict:
        return {
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "className": self.class_name,
            "instructor": self.instructor,
            "description": self.description,
        }


@dataclass(frozen=True)
class ClassRecord:
    id: str
    date: str
    start_time: str
    end_time: str
    class_name: str
    instructor: str
    description: str = ""

    @staticmethod
    def from_payload(key: str, data: Optional[Mapping[str, Any]]) -> "ClassRecord":
        """Attach the collection key as id; missing fields read as ""."""
        data = data or {}

        def _text(name: str) -> str:
            v = data.get(name)
            return "" if v is None else str(v)

        return ClassRecord(
            id=str(key),
            date=_text("date"),
            start_time=_text("startTime"),
            end_time=_text("endTime"),
            class_name=_text("className"),
            instructor=_text("instructor"),
            description=_text("description"),
        )

    @property
    def entry(self) -> ClassEntry:
        return ClassEntry(
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            class_name=self.class_name,
            instructor=self.instructor,
            description=self.description,
        )

    def with_entry(self, entry: ClassEntry) -> "ClassRecord":
        return ClassRecord(id=self.id, **vars(entry))


@dataclass(frozen=True)
class WriteResult:
    """Outcome of an update/remove. applied is False when the id did not exist."""

    id: str
    applied: bool


def validate_entry(entry: ClassEntry) -> list[str]:
    """
    Form-level checks for new or edited classes. The store itself accepts
    anything, so existing records are never rejected on read.
    """
    errors = []
    if parse_iso_date(entry.date) is None:
        errors.append("Date must look like 2024-07-01.")
    if not entry.class_name.strip():
        errors.append("Class name is required.")

    start = end = None
    try:
        start = minute_of_day(entry.start_time)
    except ValueError:
        errors.append("Start time must look like 10:00.")
    try:
        end = minute_of_day(entry.end_time)
    except ValueError:
        errors.append("End time must look like 11:00.")

    if start is not None and end is not None and end < start:
        errors.append("End time must be on/after start time.")
    return errors
