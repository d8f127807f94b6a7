# app/db_models.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, UniqueConstraint
from typing import Optional, List
from datetime import datetime, timezone


def utc_now() -> datetime:
  return datetime.now(timezone.utc)


class Product(SQLModel, table=True):
  """Catalog product. Reviews are embedded as a JSON list on the row."""
  __tablename__ = "products"
  __table_args__ = (
    # One local row per external listing, concurrent syncs included
    UniqueConstraint("external_source", "external_id", name="uq_products_external_origin"),
    {"extend_existing": True},
  )

  id: Optional[int] = Field(default=None, primary_key=True)
  user_id: str
  name: str = Field(index=True)
  image: str = ""
  description: str = ""
  brand: str = ""
  category: str = ""
  price: float = 0
  count_in_stock: int = 0
  rating: float = Field(default=0, index=True) # Index for top-N
  num_reviews: int = 0
  reviews: List[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

  # External origin
  is_external_product: bool = False
  external_source: Optional[str] = None
  external_id: Optional[str] = None

  created_at: datetime = Field(default_factory=utc_now)
  updated_at: datetime = Field(default_factory=utc_now)
