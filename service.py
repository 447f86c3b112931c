import logging
from datetime import date, datetime
from typing import Optional

from conflicts import has_conflict
from errors import Conflict, InvalidInput, NotFound, Unexpected
from listing import DateRange, filter_appointments, group_by_day
from models import Appointment, Cancellation
from notifications import Notifier
from schemas import CreateAppointment, UpdateAppointment
from store import AppointmentStore

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "This time slot conflicts with an existing appointment"
NO_REASON = "No reason provided"


class AppointmentService:
  """Appointment operations; every write re-checks the whole table for conflicts.

  The read, the check and the write are separate statements with no lock
  held across them, so two concurrent requests can still double-book.
  """

  def __init__(self, store: AppointmentStore, notifier: Optional[Notifier] = None):
    self.store = store
    self.notifier = notifier

  def list_appointments(
    self,
    date_range: DateRange = DateRange.all,
    on: Optional[date] = None,
    now: Optional[datetime] = None,
  ) -> list[Appointment]:
    return filter_appointments(self.store.list_ordered(), date_range, on=on, now=now)

  def list_by_day(self, date_range=DateRange.all, on=None, now=None):
    return group_by_day(self.list_appointments(date_range, on=on, now=now))

  def create(self, payload: CreateAppointment) -> Appointment:
    self._ensure_free(payload.date, payload.duration, "create appointment")
    appt = Appointment(
      client_name=payload.client_name,
      date=payload.date,
      reason=payload.reason,
      duration=payload.duration,
      email=payload.email,
    )
    return self.store.add(appt)

  def update(self, payload: UpdateAppointment) -> Appointment:
    appt = self._get(payload.id)
    self._ensure_free(payload.date, payload.duration, "update appointment", exclude_id=appt.id)
    appt.client_name = payload.client_name
    appt.date = payload.date
    appt.reason = payload.reason
    appt.duration = payload.duration
    if payload.email is not None:
      appt.email = payload.email
    return self.store.save(appt)

  def reschedule(
    self, appointment_id: str, new_date: Optional[datetime], client_email: Optional[str] = None
  ) -> Appointment:
    if new_date is None:
      raise InvalidInput("New date is required")
    appt = self._get(appointment_id)
    self._ensure_free(new_date, appt.duration, "reschedule appointment", exclude_id=appt.id)
    appt.date = new_date
    if client_email:
      appt.email = client_email
    appt = self.store.save(appt)
    if appt.email and self.notifier is not None:
      try:
        self.notifier.send_reschedule_confirmation(appt.client_name, appt.email, appt.date, appt.reason)
      except Exception:
        # the update stays committed when the mail cannot be sent
        logger.exception("Failed to send reschedule confirmation for appointment %s", appt.id)
    return appt

  def cancel(self, appointment_id: Optional[str], cancellation_reason: Optional[str] = None) -> str:
    if not appointment_id:
      raise InvalidInput("Appointment ID is required")
    reason = cancellation_reason or NO_REASON
    appt = self._get(appointment_id)
    record = Cancellation(
      appointment_id=appt.id,
      client_name=appt.client_name,
      date=appt.date,
      duration=appt.duration,
      reason=appt.reason,
      cancellation_reason=reason,
    )
    self.store.delete(appt, record)
    logger.info("Appointment %s cancelled. Reason: %s", appointment_id, reason)
    return reason

  def _get(self, appointment_id: str) -> Appointment:
    appt = self.store.get(appointment_id)
    if appt is None:
      raise NotFound("Appointment not found")
    return appt

  def _ensure_free(
    self, start: datetime, duration: int, action: str, exclude_id: Optional[str] = None
  ) -> None:
    try:
      existing = self.store.list_all()
    except Unexpected as e:
      raise Unexpected(f"Failed to {action}") from e
    try:
      taken = has_conflict(start, duration, existing, exclude_id=exclude_id)
    except OverflowError as e:
      raise InvalidInput("Appointment time is out of range") from e
    if taken:
      logger.info("Rejected slot %s (%s min): conflicts with an existing appointment", start, duration)
      raise Conflict(CONFLICT_MESSAGE)
