from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase


class Base(DeclarativeBase):
  pass


def build_engine(database_url: str, ssl_ca: Optional[str] = None, **kwargs) -> Engine:
  connect_args = {}
  if database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
  elif database_url.startswith("mysql+pymysql://"):
    if ssl_ca:
      connect_args = {"ssl": {"ca": ssl_ca}}
    elif "mysql.database.azure.com" in database_url:
      # Azure MySQL requires TLS even without a CA bundle
      connect_args = {"ssl": {}}
  return create_engine(
    database_url,
    pool_pre_ping=True,
    connect_args=connect_args,
    **kwargs,
  )


def build_session_factory(engine: Engine) -> sessionmaker:
  return sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
  )


def init_db(engine: Engine) -> None:
  # models must be imported so their tables register on Base.metadata
  import models  # noqa: F401
  Base.metadata.create_all(bind=engine)
