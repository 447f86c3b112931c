import logging
import ssl
import smtplib
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Protocol

from config import Settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
  def send_reschedule_confirmation(
    self, client_name: str, email: str, new_date: datetime, reason: str
  ) -> None:
    ...


def render_reschedule_email(client_name: str, new_date: datetime, reason: str) -> tuple[str, str]:
  when_str = new_date.strftime("%A, %b %d %Y at %I:%M %p")
  text_body = f"""
Hello {client_name},

Your appointment has been rescheduled.

New time: {when_str}
Service: {reason or '-'}
  """.strip()
  html_body = f"""
  <h2>Your appointment has been rescheduled</h2>
  <p>Hello {client_name},</p>
  <p><strong>New time:</strong> {when_str}</p>
  <p><strong>Service:</strong> {reason or '-'}</p>
  """.strip()
  return text_body, html_body


class SmtpNotifier:
  def __init__(self, settings: Settings):
    self.settings = settings

  def send_reschedule_confirmation(self, client_name, email, new_date, reason):
    s = self.settings
    text_body, html_body = render_reschedule_email(client_name, new_date, reason)
    msg = MIMEMultipart("alternative")
    msg["Subject"] = "Appointment Rescheduled"
    msg["From"] = f"{s.mail_from_name} <{s.smtp_user}>"
    msg["To"] = email
    msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))
    context = ssl.create_default_context()
    with smtplib.SMTP(s.smtp_host, s.smtp_port) as server:
      if s.smtp_port == 587:
        server.starttls(context=context)
      server.login(s.smtp_user, s.smtp_pass)
      server.sendmail(s.smtp_user, [email], msg.as_string())
    logger.info("Sent reschedule confirmation to %s", email)


class LogNotifier:
  """Used when SMTP is not configured; the message is only logged."""

  def send_reschedule_confirmation(self, client_name, email, new_date, reason):
    text_body, _ = render_reschedule_email(client_name, new_date, reason)
    logger.info("SMTP not configured. Reschedule email would be sent to %s:\n%s", email, text_body)


def build_notifier(settings: Settings) -> Notifier:
  if settings.smtp_configured:
    return SmtpNotifier(settings)
  return LogNotifier()
