# app/database.py

from sqlmodel import SQLModel, create_engine, Session
import os
from app import config
from app.logger import get_logger

log = get_logger(__name__)


def _make_engine(url: str):
  connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
  return create_engine(url, echo=False, connect_args=connect_args)


engine = _make_engine(config.DATABASE_URL)


def _sqlite_file(url: str):
  """Returns the file path of a sqlite URL, None for memory or other drivers"""
  prefix = "sqlite:///"
  if url.startswith(prefix) and url != prefix + ":memory:":
    return url[len(prefix):]
  return None


def init_db(bind=None):
  """Creates the catalog tables"""
  from app.db_models import Product

  bind = bind or engine

  # Ensure the db directory exists
  db_file = _sqlite_file(str(bind.url))
  if db_file and os.path.dirname(db_file):
    os.makedirs(os.path.dirname(db_file), exist_ok=True)

  SQLModel.metadata.create_all(bind, tables=[Product.__table__], checkfirst=True)
  log.info(f"Initialized catalog database ({bind.url})")


def get_session():
  """Request scoped session, used as a FastAPI dependency"""
  with Session(engine) as session:
    yield session
