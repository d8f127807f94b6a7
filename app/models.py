# app/models.py

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, timezone


class Review(BaseModel):
  user_id: str
  name: str
  rating: float
  comment: str = ""
  created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Product(BaseModel):
  """Product as returned by the API"""
  id: int
  user_id: str
  name: str
  image: str = ""
  description: str = ""
  brand: str = ""
  category: str = ""
  price: float = 0
  count_in_stock: int = 0
  rating: float = 0
  num_reviews: int = 0
  reviews: List[Review] = Field(default_factory=list)
  is_external_product: bool = False
  external_source: Optional[str] = None
  external_id: Optional[str] = None
  created_at: Optional[datetime] = None
  updated_at: Optional[datetime] = None


class ProductCreate(BaseModel):
  name: str
  image: str = ""
  description: str = ""
  brand: str = ""
  category: str = ""
  price: float = 0
  count_in_stock: int = 0


class ProductUpdate(BaseModel):
  """Every field is optional, falsy values keep the stored value"""
  name: Optional[str] = None
  image: Optional[str] = None
  description: Optional[str] = None
  brand: Optional[str] = None
  category: Optional[str] = None
  price: Optional[float] = None
  count_in_stock: Optional[int] = None


class ReviewCreate(BaseModel):
  rating: float
  comment: str = ""


class SyncRequest(BaseModel):
  api_source: Optional[str] = None
  category: Optional[str] = None
  limit: int = Field(20, ge=1, le=100)


class CurrentUser(BaseModel):
  """Identity handed over by the authentication layer"""
  id: str
  name: str = "Anonymous"


class ProductList(BaseModel):
  products: List[Product]
  total: int
  max_limit: int
  max_skip: int


class ProductCreated(BaseModel):
  message: str
  created_product: Product


class ProductUpdated(BaseModel):
  message: str
  updated_product: Product


class Message(BaseModel):
  message: str


class SyncResult(BaseModel):
  message: str
  synced_products: int
  total_products: int
