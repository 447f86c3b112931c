from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field


def to_naive_utc(value: datetime) -> datetime:
  """Stored timestamps are naive UTC; aware input is converted first."""
  if value.tzinfo is None:
    return value
  try:
    return value.astimezone(timezone.utc).replace(tzinfo=None)
  except OverflowError as e:
    raise ValueError("date is out of range") from e


MAX_DURATION_MINUTES = 24 * 60

Timestamp = Annotated[datetime, AfterValidator(to_naive_utc)]


class _Body(BaseModel):
  model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CreateAppointment(_Body):
  client_name: str = Field(alias="clientName", min_length=1)
  date: Timestamp
  reason: str = ""
  duration: int = Field(gt=0, le=MAX_DURATION_MINUTES)
  email: Optional[EmailStr] = None


class UpdateAppointment(CreateAppointment):
  id: str = Field(min_length=1)


class RescheduleAppointment(_Body):
  new_date: Optional[Timestamp] = Field(default=None, alias="newDate")
  client_email: Optional[EmailStr] = Field(default=None, alias="clientEmail")


class CancelAppointment(_Body):
  cancellation_reason: Optional[str] = Field(default=None, alias="cancellationReason")


class AppointmentOut(BaseModel):
  model_config = ConfigDict(from_attributes=True, populate_by_name=True)

  id: str
  client_name: str = Field(alias="clientName")
  date: datetime
  reason: str
  duration: int
  email: Optional[str] = None


class DayGroup(BaseModel):
  day: str
  appointments: list[AppointmentOut]


class CancelResult(BaseModel):
  message: str
  cancellation_reason: str = Field(alias="cancellationReason")

  model_config = ConfigDict(populate_by_name=True)
