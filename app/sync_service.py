# app/sync_service.py

import math
import random
from typing import List, Optional
from bs4 import BeautifulSoup
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_, and_
from app import config
from app.db_models import Product
from app.models import CurrentUser, SyncRequest, SyncResult
from app.external_sources import fetch_external_products
from app.catalog_service import count_products
from app.logger import get_logger

log = get_logger(__name__)

KNOWN_BRANDS = ["ACER", "HP", "ASUS", "MSI", "DELL", "LENOVO", "APPLE", "SAMSUNG", "TOSHIBA"]

EXTERNAL_CATEGORY = "Electronics"


def extract_brand_from_name(name: str) -> str:
  """First known brand contained in the name, 'UNKNOWN' otherwise"""
  upper_name = (name or "").upper()
  for brand in KNOWN_BRANDS:
    if brand in upper_name:
      return brand
  return "UNKNOWN"


def convert_price(price, rate: float = None) -> int:
  """USD -> INR, rounded half up"""
  rate = config.USD_TO_INR_RATE if rate is None else rate
  try:
    value = float(price or 0)
  except (TypeError, ValueError):
    value = 0.0
  return math.floor(value * rate + 0.5)


def clean_description(description) -> str:
  """Strip markup some sources put in descriptions"""
  if not description:
    return ""
  return BeautifulSoup(str(description), "html.parser").get_text(" ", strip=True)


def _rating_fields(raw_rating):
  """Returns (rating, num_reviews) from the source, None where missing"""
  if isinstance(raw_rating, dict):
    return raw_rating.get("rate"), raw_rating.get("count")
  if isinstance(raw_rating, (int, float)) and not isinstance(raw_rating, bool):
    return raw_rating, None
  return None, None


def transform_external_product(raw: dict, source: str, user: CurrentUser) -> Optional[dict]:
  """
  Map an external record to catalog fields.

  Missing stock, rating and review count are filled with random values.

  Returns:
    dict or None: Product fields, None when the record has no text name
  """
  name = raw.get("name") or raw.get("title")
  if not name:
    log.warning(f"[SYNC] Skipping {source} record without name: id={raw.get('id') or raw.get('_id')}")
    return None
  if not isinstance(name, str):
    log.warning(f"[SYNC] Skipping {source} record with non-text name {name!r}: id={raw.get('id') or raw.get('_id')}")
    return None

  rating, num_reviews = _rating_fields(raw.get("rating"))
  external_id = raw.get("id") or raw.get("_id")

  return {
    "name": name,
    "image": raw.get("image") or raw.get("imageUrl") or "",
    "description": clean_description(raw.get("description")),
    "brand": raw.get("brand") or extract_brand_from_name(name),
    "category": EXTERNAL_CATEGORY,
    "price": convert_price(raw.get("price")),
    "count_in_stock": random.randint(1, 20),
    "rating": rating or random.uniform(3, 5),
    "num_reviews": num_reviews or random.randint(10, 109),
    "user_id": user.id,
    "is_external_product": True,
    "external_source": source,
    "external_id": str(external_id) if external_id is not None else None
  }


def product_exists(session: Session, fields: dict) -> bool:
  """A product with the same name or the same (external id, source) pair"""
  conditions = [Product.name == fields["name"]]
  if fields.get("external_id") is not None:
    conditions.append(and_(
      Product.external_id == fields["external_id"],
      Product.external_source == fields["external_source"]
    ))
  statement = select(Product.id).where(or_(*conditions)).limit(1)
  return session.exec(statement).first() is not None


def save_new_products(session: Session, transformed: List[dict]) -> List[Product]:
  """
  Insert the records not already in the catalog.

  The (external_source, external_id) unique constraint rejects an insert a
  concurrent sync already made, that record is counted as skipped.
  """
  saved = list()
  for fields in transformed:
    if product_exists(session, fields):
      log.debug(f"[SYNC] Skipping existing product '{fields['name']}'")
      continue

    product = Product(**fields)
    try:
      session.add(product)
      session.commit()
      session.refresh(product)
    except IntegrityError as e:
      session.rollback()
      log.warning(f"[SYNC] Product '{fields['name']}' inserted concurrently, skipped: {e.orig}")
      continue
    except Exception as e:
      session.rollback()
      log.error(f"[SYNC] Error saving product '{fields['name']}': {e}")
      raise
    saved.append(product)

  return saved


def sync_external_products(session: Session, request: SyncRequest, user: CurrentUser) -> SyncResult:
  """
  Import products from a third-party API into the catalog.

  Args:
    session (Session): Catalog database session
    request (SyncRequest): Source name, category and limit
    user (CurrentUser): Owner of the imported products

  Returns:
    SyncResult: Number of inserted products and catalog size after the sync

  Raises:
    InvalidSourceError: Unknown source name
  """
  source = request.api_source
  log.info(f"[SYNC] Starting sync from '{source}' category={request.category} limit={request.limit}")

  external_products = fetch_external_products(source, request.category, request.limit)
  log.info(f"[SYNC] Fetched {len(external_products)} products from {source}")

  transformed = list()
  for raw in external_products:
    fields = transform_external_product(raw, source, user)
    if fields:
      transformed.append(fields)

  saved = save_new_products(session, transformed)
  total = count_products(session)

  log.info(f"[SYNC] Synced {len(saved)} of {len(transformed)} products from {source}, catalog total {total}")
  return SyncResult(
    message=f"Successfully synced {len(saved)} products from {source}",
    synced_products=len(saved),
    total_products=total
  )
