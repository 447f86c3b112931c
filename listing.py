"""Date-range filters and per-day grouping for appointment listings."""

import calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Optional

from models import Appointment


class DateRange(str, Enum):
  all = "all"
  today = "today"
  week = "week"
  month = "month"
  custom = "custom"


def filter_appointments(
  appointments: Iterable[Appointment],
  date_range: DateRange = DateRange.all,
  on: Optional[date] = None,
  now: Optional[datetime] = None,
) -> list[Appointment]:
  """Keep appointments inside ``date_range``, relative to ``now``.

  ``week`` runs from the start of today to seven days from now; ``month``
  from the start of today to the end of the current month. ``custom``
  keeps the calendar day ``on`` and keeps everything when ``on`` is None.
  """
  items = list(appointments)
  now = now or datetime.utcnow()
  start_of_today = datetime.combine(now.date(), time.min)

  if date_range == DateRange.today:
    return [a for a in items if a.date.date() == now.date()]
  if date_range == DateRange.week:
    end = now + timedelta(days=7)
    return [a for a in items if start_of_today <= a.date <= end]
  if date_range == DateRange.month:
    last_day = calendar.monthrange(now.year, now.month)[1]
    end = datetime.combine(date(now.year, now.month, last_day), time.max)
    return [a for a in items if start_of_today <= a.date <= end]
  if date_range == DateRange.custom:
    if on is None:
      return items
    return [a for a in items if a.date.date() == on]
  return items


def group_by_day(appointments: Iterable[Appointment]) -> list[tuple[str, list[Appointment]]]:
  groups: dict[str, list[Appointment]] = defaultdict(list)
  for appt in appointments:
    groups[appt.date.strftime("%Y-%m-%d")].append(appt)
  return sorted(groups.items(), key=lambda item: item[0])
