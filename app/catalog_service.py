# app/catalog_service.py

from typing import List, Optional, Tuple
from sqlmodel import Session, select, func, col
from app import config
from app.db_models import Product, utc_now
from app.models import ProductCreate, ProductUpdate, ReviewCreate, CurrentUser, Review
from app.file_utils import delete_file
from app.logger import get_logger
import app.exceptions as ex

log = get_logger(__name__)

# Fields an admin may change through create/update
EDITABLE_FIELDS = ("name", "image", "description", "brand", "category", "price", "count_in_stock")

TOP_PRODUCTS_COUNT = 3


def count_products(session: Session) -> int:
  return session.exec(select(func.count()).select_from(Product)).one()


def clamp_pagination(total: int, limit: Optional[int], skip: Optional[int], max_limit: int) -> Tuple[int, int, int]:
  """
  Clamp requested limit/skip against the catalog size.

  Args:
    total (int): Number of products in the catalog
    limit (Optional[int]): Requested page size, missing/0/negative means max_limit
    skip (Optional[int]): Requested offset, missing means 0
    max_limit (int): Configured maximum page size

  Returns:
    Tuple[int, int, int]: (limit, skip, max_skip)
  """
  max_skip = 0 if total == 0 else total - 1

  if not limit or limit < 0:
    limit = max_limit
  limit = min(limit, max_limit)

  skip = skip or 0
  skip = max(0, min(skip, max_skip))

  return limit, skip, max_skip


def list_products(session: Session, limit: Optional[int] = None, skip: Optional[int] = None, search: Optional[str] = None) -> dict:
  """
  Page through the catalog, optionally filtering names by a case-insensitive substring.

  Raises:
    ProductsNotFoundError: Nothing matched
  """
  total = count_products(session)
  max_limit = config.PAGINATION_MAX_LIMIT
  limit, skip, max_skip = clamp_pagination(total, limit, skip, max_limit)
  search = search or ""

  log.info(f"Listing products total={total} max_limit={max_limit} max_skip={max_skip} limit={limit} skip={skip} search='{search}'")

  statement = select(Product)
  if search:
    statement = statement.where(col(Product.name).icontains(search, autoescape=True))
  statement = statement.order_by(Product.id).offset(skip).limit(limit)

  products = session.exec(statement).all()
  if not products:
    raise ex.ProductsNotFoundError()

  return {
    "products": products,
    "total": total,
    "max_limit": max_limit,
    "max_skip": max_skip
  }


def get_top_products(session: Session, count: int = TOP_PRODUCTS_COUNT) -> List[Product]:
  """Highest rated products first"""
  statement = select(Product).order_by(col(Product.rating).desc(), Product.id).limit(count)
  return session.exec(statement).all()


def get_product(session: Session, product_id: int) -> Product:
  product = session.get(Product, product_id)
  if not product:
    log.warning(f"Product {product_id} not found")
    raise ex.ProductNotFoundError()
  return product


def _commit(session: Session, product: Product, action: str) -> Product:
  try:
    session.add(product)
    session.commit()
    session.refresh(product)
  except Exception as e:
    log.error(f"Error {action} product '{product.name}': {e}")
    session.rollback()
    raise
  return product


def create_product(session: Session, data: ProductCreate, user: CurrentUser) -> Product:
  product = Product(user_id=user.id, **data.model_dump(include=set(EDITABLE_FIELDS)))
  product = _commit(session, product, "creating")
  log.info(f"Product {product.id} '{product.name}' created by user {user.id}")
  return product


def update_product(session: Session, product_id: int, data: ProductUpdate) -> Product:
  """
  Apply the provided fields to a product.

  A falsy value (None, 0, "") keeps the stored value, so a zero price or an
  empty string cannot be written through update. The previous image is
  deleted when the image changes.
  """
  product = get_product(session, product_id)
  previous_image = product.image

  for field in EDITABLE_FIELDS:
    value = getattr(data, field)
    setattr(product, field, value or getattr(product, field))
  product.updated_at = utc_now()

  product = _commit(session, product, "updating")
  log.info(f"Product {product.id} updated")

  if previous_image and previous_image != product.image:
    delete_file(previous_image)

  return product


def delete_product(session: Session, product_id: int) -> None:
  product = get_product(session, product_id)
  image = product.image

  try:
    session.delete(product)
    session.commit()
  except Exception as e:
    log.error(f"Error deleting product {product_id}: {e}")
    session.rollback()
    raise

  log.info(f"Product {product_id} deleted")
  delete_file(image) # Remove upload file


def average_rating(reviews: List[dict]) -> float:
  if not reviews:
    return 0
  return sum(review["rating"] for review in reviews) / len(reviews)


def add_review(session: Session, product_id: int, data: ReviewCreate, user: CurrentUser) -> Product:
  """
  Append a review and recompute the aggregate rating and count.

  Raises:
    ProductNotFoundError: Unknown product
    ProductAlreadyReviewedError: The user already reviewed this product
  """
  product = get_product(session, product_id)

  already_reviewed = any(str(review.get("user_id")) == str(user.id) for review in product.reviews)
  if already_reviewed:
    log.warning(f"User {user.id} already reviewed product {product_id}")
    raise ex.ProductAlreadyReviewedError()

  review = Review(user_id=user.id, name=user.name, rating=float(data.rating), comment=data.comment)

  # Reassign so the JSON column is flagged as modified
  product.reviews = product.reviews + [review.model_dump(mode="json")]
  product.rating = average_rating(product.reviews)
  product.num_reviews = len(product.reviews)
  product.updated_at = utc_now()

  product = _commit(session, product, "reviewing")
  log.info(f"Review added to product {product_id} by user {user.id}, rating now {product.rating:.2f}")
  return product
