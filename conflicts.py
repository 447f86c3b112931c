"""Time-slot conflict detection for appointments."""

from datetime import datetime, timedelta
from typing import Any, Iterable, Optional


def has_conflict(
  candidate_start: datetime,
  candidate_duration: int,
  existing: Iterable[Any],
  exclude_id: Optional[str] = None,
) -> bool:
  """Return True if any existing appointment clashes with the candidate slot.

  Each existing record must expose ``id``, ``date`` (its start) and
  ``duration``. A record whose id equals ``exclude_id`` is ignored, so an
  appointment being edited never clashes with its own previous slot.

  Only the start of an existing record is inspected. It clashes when it
  falls inside either inclusive window:

    [candidate_start - candidate_duration, candidate_start]
    [candidate_start, candidate_start + candidate_duration]

  The existing record's own end is never computed, so a long appointment
  starting before the first window is not reported even if its tail
  reaches the candidate. Callers rely on this exact behaviour.
  """
  span = timedelta(minutes=candidate_duration)
  candidate_end = candidate_start + span
  window_start = candidate_start - span

  for appt in existing:
    if exclude_id is not None and appt.id == exclude_id:
      continue
    start = appt.date
    if window_start <= start <= candidate_start:
      return True
    if candidate_start <= start <= candidate_end:
      return True
  return False
