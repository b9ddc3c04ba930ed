# classcal/repositories/schedule_queries.py
from datetime import date, timedelta
from typing import Iterable

import pandas as pd

from classcal.config import WEEKDAYS
from classcal.models.classes import ClassRecord
from classcal.utils.time_parser import start_sort_key


def classes_on_date(records: Iterable[ClassRecord], day: str) -> list[ClassRecord]:
    """
    Classes whose date string equals `day` exactly, ordered by start time as
    minutes since midnight ("9:00" before "10:00"). Equal start times keep
    their input order.
    """
    matching = [r for r in records if r.date == day]
    return sorted(matching, key=lambda r: start_sort_key(r.start_time))


def week_start(anchor: date, offset: int = 0) -> date:
    """Sunday of the week containing `anchor`, moved by `offset` weeks."""
    days_since_sunday = (anchor.weekday() + 1) % 7
    return anchor - timedelta(days=days_since_sunday) + timedelta(weeks=offset)


def week_dates(start: date) -> list[date]:
    return [start + timedelta(days=i) for i in range(7)]


def week_schedule(records: Iterable[ClassRecord], start: date) -> dict[str, list[ClassRecord]]:
    records = list(records)
    return {d.isoformat(): classes_on_date(records, d.isoformat()) for d in week_dates(start)}


def day_label(d: date) -> str:
    return f"{WEEKDAYS[(d.weekday() + 1) % 7]} {d.month:02d}/{d.day:02d}"


def format_class_cell(r: ClassRecord) -> str:
    return f"{r.class_name} {r.start_time}-{r.end_time} ({r.instructor})"


def week_table_df(records: Iterable[ClassRecord], start: date) -> pd.DataFrame:
    """One column per day of the week, one row per class slot."""
    schedule = week_schedule(records, start)
    columns = {
        day_label(date.fromisoformat(iso)): [format_class_cell(r) for r in day_classes]
        for iso, day_classes in schedule.items()
    }
    height = max((len(v) for v in columns.values()), default=0)
    padded = {k: v + [""] * (height - len(v)) for k, v in columns.items()}
    return pd.DataFrame(padded, columns=list(columns.keys()))
