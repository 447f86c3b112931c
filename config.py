import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


def _default_database_url() -> str:
  db_dir = os.path.join(".", "data")
  os.makedirs(db_dir, exist_ok=True)
  return f"sqlite:///{os.path.join(db_dir, 'appointments.db')}"


@dataclass
class Settings:
  database_url: str
  mysql_ssl_ca: Optional[str] = None
  smtp_host: Optional[str] = None
  smtp_port: int = 587
  smtp_user: Optional[str] = None
  smtp_pass: Optional[str] = None
  mail_from_name: str = "Appointment Booker"
  cors_origins: list[str] = field(default_factory=list)
  log_level: str = "INFO"

  @property
  def smtp_configured(self) -> bool:
    return bool(self.smtp_host and self.smtp_user and self.smtp_pass)


def load_settings() -> Settings:
  load_dotenv()
  database_url = (os.getenv("DATABASE_URL") or "").strip() or _default_database_url()
  origins = os.getenv("CORS_ORIGINS") or "http://localhost:3000,http://127.0.0.1:3000"
  return Settings(
    database_url=database_url,
    mysql_ssl_ca=os.getenv("MYSQL_SSL_CA") or os.getenv("DB_SSL_CA"),
    smtp_host=os.getenv("SMTP_HOST"),
    smtp_port=int(os.getenv("SMTP_PORT", "587")),
    smtp_user=os.getenv("SMTP_USER"),
    smtp_pass=os.getenv("SMTP_PASS"),
    mail_from_name=os.getenv("MAIL_FROM_NAME") or "Appointment Booker",
    cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
  )
