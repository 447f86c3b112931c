import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import Unexpected
from models import Appointment, Cancellation

logger = logging.getLogger(__name__)


class AppointmentStore:
  """Appointment persistence over a request-scoped SQLAlchemy session."""

  def __init__(self, session: Session):
    self.session = session

  def list_ordered(self) -> list[Appointment]:
    try:
      return list(self.session.scalars(select(Appointment).order_by(Appointment.date.asc())))
    except SQLAlchemyError as e:
      logger.exception("Error fetching appointments")
      raise Unexpected("Failed to fetch appointments") from e

  def list_all(self) -> list[Appointment]:
    # conflict checks always see the full table, never a time window
    return self.list_ordered()

  def get(self, appointment_id: str) -> Optional[Appointment]:
    try:
      return self.session.get(Appointment, appointment_id)
    except SQLAlchemyError as e:
      logger.exception("Error getting appointment %s", appointment_id)
      raise Unexpected("Failed to fetch appointment") from e

  def add(self, appt: Appointment) -> Appointment:
    return self._commit(appt, "Failed to create appointment")

  def save(self, appt: Appointment) -> Appointment:
    return self._commit(appt, "Failed to update appointment")

  def delete(self, appt: Appointment, cancellation: Cancellation) -> None:
    try:
      self.session.add(cancellation)
      self.session.delete(appt)
      self.session.commit()
    except SQLAlchemyError as e:
      self.session.rollback()
      logger.exception("Error cancelling appointment %s", appt.id)
      raise Unexpected("Failed to cancel appointment") from e

  def _commit(self, appt: Appointment, failure: str) -> Appointment:
    try:
      self.session.add(appt)
      self.session.commit()
      self.session.refresh(appt)
      return appt
    except SQLAlchemyError as e:
      self.session.rollback()
      logger.exception(failure)
      raise Unexpected(failure) from e
