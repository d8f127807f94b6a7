# tests/conftest.py

import os
os.environ.setdefault("APP_ENV", "testing")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

from app import config
from app.main import app
from app.database import get_session, init_db
from app.db_models import Product

USER = {"X-User-Id": "user-1", "X-User-Name": "Alice"}
OTHER_USER = {"X-User-Id": "user-2", "X-User-Name": "Bob"}


@pytest.fixture
def engine():
  engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
  init_db(engine)
  yield engine
  SQLModel.metadata.drop_all(engine)
  engine.dispose()


@pytest.fixture
def session(engine):
  with Session(engine) as session:
    yield session


@pytest.fixture
def upload_root(tmp_path, monkeypatch):
  monkeypatch.setattr(config, "UPLOAD_ROOT", str(tmp_path))
  return tmp_path


@pytest.fixture
def client(engine, upload_root):
  def override_get_session():
    with Session(engine) as session:
      yield session

  app.dependency_overrides[get_session] = override_get_session
  yield TestClient(app, raise_server_exceptions=False)
  app.dependency_overrides.clear()


@pytest.fixture
def make_product(session):
  """Insert a product straight into the test database"""
  def _make(**fields):
    fields.setdefault("user_id", "admin")
    fields.setdefault("name", "Product")
    product = Product(**fields)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product
  return _make
