import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, Text

from db import Base


def _new_id() -> str:
  return uuid.uuid4().hex


class Appointment(Base):
  __tablename__ = "appointments"

  id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
  client_name: Mapped[str] = mapped_column(String(120))
  date: Mapped[datetime] = mapped_column(DateTime, index=True)
  duration: Mapped[int] = mapped_column(Integer)
  reason: Mapped[str] = mapped_column(Text, default="")
  email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
  created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

  def __repr__(self) -> str:
    return f"<Appointment {self.id} {self.client_name!r} at {self.date} for {self.duration}m>"


class Cancellation(Base):
  """Audit row written when an appointment is cancelled."""
  __tablename__ = "cancellations"

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  appointment_id: Mapped[str] = mapped_column(String(32), index=True)
  client_name: Mapped[str] = mapped_column(String(120))
  date: Mapped[datetime] = mapped_column(DateTime)
  duration: Mapped[int] = mapped_column(Integer)
  reason: Mapped[str] = mapped_column(Text, default="")
  cancellation_reason: Mapped[str] = mapped_column(Text)
  cancelled_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
