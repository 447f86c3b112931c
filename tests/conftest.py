import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from config import Settings
from db import build_engine, build_session_factory, init_db
from main import create_app


class RecordingNotifier:
  def __init__(self, fail=False):
    self.sent = []
    self.fail = fail

  def send_reschedule_confirmation(self, client_name, email, new_date, reason):
    self.sent.append((client_name, email, new_date, reason))
    if self.fail:
      raise OSError("smtp down")


@pytest.fixture
def engine():
  engine = build_engine("sqlite://", poolclass=StaticPool)
  init_db(engine)
  yield engine
  engine.dispose()


@pytest.fixture
def session(engine):
  db = build_session_factory(engine)()
  try:
    yield db
  finally:
    db.close()


@pytest.fixture
def notifier():
  return RecordingNotifier()


@pytest.fixture
def client(engine, notifier):
  settings = Settings(database_url="sqlite://", cors_origins=["http://localhost:3000"])
  app = create_app(settings, engine=engine, notifier=notifier)
  with TestClient(app) as c:
    yield c
