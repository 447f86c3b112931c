from datetime import datetime

import notifications
from config import Settings
from notifications import LogNotifier, SmtpNotifier, build_notifier


class FakeSMTP:
  instances = []

  def __init__(self, host, port):
    self.host, self.port = host, port
    self.started_tls = False
    self.sent = []
    FakeSMTP.instances.append(self)

  def __enter__(self):
    return self

  def __exit__(self, *exc):
    return False

  def starttls(self, context=None):
    self.started_tls = True

  def login(self, user, password):
    self.login_as = (user, password)

  def sendmail(self, sender, recipients, body):
    self.sent.append((sender, recipients, body))


def smtp_settings(**overrides):
  values = dict(database_url="sqlite://", smtp_host="smtp.test", smtp_user="bot@shop.io", smtp_pass="pw")
  values.update(overrides)
  return Settings(**values)


def test_build_notifier_without_smtp_logs_only():
  assert isinstance(build_notifier(Settings(database_url="sqlite://")), LogNotifier)
  assert isinstance(build_notifier(smtp_settings()), SmtpNotifier)


def test_smtp_notifier_sends_confirmation(monkeypatch):
  FakeSMTP.instances = []
  monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)

  SmtpNotifier(smtp_settings()).send_reschedule_confirmation(
    "Ada", "ada@example.com", datetime(2024, 1, 5, 16, 0), "Haircut"
  )

  server = FakeSMTP.instances[0]
  assert (server.host, server.port) == ("smtp.test", 587)
  assert server.started_tls
  assert server.login_as == ("bot@shop.io", "pw")
  sender, recipients, body = server.sent[0]
  assert sender == "bot@shop.io"
  assert recipients == ["ada@example.com"]
  assert "Appointment Rescheduled" in body


def test_log_notifier_renders_message(caplog):
  caplog.set_level("INFO", logger="notifications")
  LogNotifier().send_reschedule_confirmation("Ada", "ada@example.com", datetime(2024, 1, 5, 16, 0), "Haircut")
  assert "ada@example.com" in caplog.text
  assert "Friday, Jan 05 2024 at 04:00 PM" in caplog.text


def test_load_settings_reads_environment(monkeypatch):
  from config import load_settings

  monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp.db")
  monkeypatch.setenv("SMTP_PORT", "2525")
  monkeypatch.setenv("CORS_ORIGINS", "https://a.io, https://b.io")
  monkeypatch.setenv("LOG_LEVEL", "debug")
  s = load_settings()
  assert s.database_url == "sqlite:///tmp.db"
  assert s.smtp_port == 2525
  assert s.cors_origins == ["https://a.io", "https://b.io"]
  assert s.log_level == "DEBUG"
