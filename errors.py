class AppointmentError(Exception):
  """Base for failures surfaced to API callers with a status code."""
  status_code = 500

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message


class NotFound(AppointmentError):
  status_code = 404


class Conflict(AppointmentError):
  status_code = 409


class InvalidInput(AppointmentError):
  status_code = 400


class Unexpected(AppointmentError):
  status_code = 500
