# app/main.py

from fastapi import FastAPI, Query, Depends
from fastapi import Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlmodel import Session

from typing import List, Optional
from app.models import (Product, ProductCreate, ProductUpdate, ReviewCreate, SyncRequest, SyncResult,
                        CurrentUser, ProductList, ProductCreated, ProductUpdated, Message)
from app.database import init_db, get_session
from app.dependencies import get_current_user
import app.exceptions as ex
import app.catalog_service as catalog
from app.sync_service import sync_external_products

from app.logger import configure_logging, get_logger
configure_logging()

log = get_logger(__name__)
log.info("FastAPI application is starting...")

API_PREFIX = "/api/v1/products"


@asynccontextmanager
async def lifespan(app:FastAPI):
  # Application startup
  init_db()
  yield


app = FastAPI(title="Product Catalog API",
              lifespan=lifespan,
              description="Product catalog CRUD, reviews and external marketplace sync.",
              version="1.0.0")


def to_product(record) -> Product:
  return Product.model_validate(record.model_dump())


@app.get(API_PREFIX, response_model=ProductList)
def get_products(
  limit: Optional[int] = Query(None, description="Page size, capped by PAGINATION_MAX_LIMIT"),
  skip: Optional[int] = Query(None, description="Offset, clamped to [0, total-1]"),
  search: Optional[str] = Query(None, description="Case-insensitive name filter"),
  session: Session = Depends(get_session)
  ):
  """
  Paginated product list. Returns 404 when nothing matches.
  """
  log.info(f"GET {API_PREFIX} called with limit={limit} skip={skip} search='{search}'")
  page = catalog.list_products(session, limit=limit, skip=skip, search=search)
  page["products"] = [to_product(p) for p in page["products"]]
  return page


@app.get(f"{API_PREFIX}/top", response_model=List[Product])
def get_top_products(session: Session = Depends(get_session)):
  """The 3 highest rated products"""
  return [to_product(p) for p in catalog.get_top_products(session)]


@app.post(f"{API_PREFIX}/sync-external", response_model=SyncResult)
def sync_external(
  body: SyncRequest,
  session: Session = Depends(get_session),
  user: CurrentUser = Depends(get_current_user)
  ):
  """
  Fetch products from an external API (fakestore, bestbuy, amazon) and add the new ones to the catalog.
  """
  log.info(f"/sync-external called by user {user.id} with source='{body.api_source}'")
  return sync_external_products(session, body, user)


@app.post(f"{API_PREFIX}/reviews/{{product_id}}", response_model=Message, status_code=201)
def create_product_review(
  product_id: int,
  body: ReviewCreate,
  session: Session = Depends(get_session),
  user: CurrentUser = Depends(get_current_user)
  ):
  catalog.add_review(session, product_id, body, user)
  return Message(message="Review added")


@app.get(f"{API_PREFIX}/{{product_id}}", response_model=Product)
def get_product(product_id: int, session: Session = Depends(get_session)):
  return to_product(catalog.get_product(session, product_id))


@app.post(API_PREFIX, response_model=ProductCreated)
def create_product(
  body: ProductCreate,
  session: Session = Depends(get_session),
  user: CurrentUser = Depends(get_current_user)
  ):
  product = catalog.create_product(session, body, user)
  return ProductCreated(message="Product created", created_product=to_product(product))


@app.put(f"{API_PREFIX}/{{product_id}}", response_model=ProductUpdated)
def update_product(
  product_id: int,
  body: ProductUpdate,
  session: Session = Depends(get_session),
  user: CurrentUser = Depends(get_current_user)
  ):
  log.info(f"User {user.id} updating product {product_id}")
  product = catalog.update_product(session, product_id, body)
  return ProductUpdated(message="Product updated", updated_product=to_product(product))


@app.delete(f"{API_PREFIX}/{{product_id}}", response_model=Message)
def delete_product(
  product_id: int,
  session: Session = Depends(get_session),
  user: CurrentUser = Depends(get_current_user)
  ):
  log.info(f"User {user.id} deleting product {product_id}")
  catalog.delete_product(session, product_id)
  return Message(message="Product deleted")


@app.get("/")
def root():
  return {"messages": f"Product Catalog API - endpoints: {API_PREFIX}?limit=&skip=&search=, {API_PREFIX}/top, {API_PREFIX}/{{id}}, {API_PREFIX}/reviews/{{id}}, {API_PREFIX}/sync-external"}


@app.get("/health")
def healthcheck():
  return {"status": "ok"}


@app.exception_handler(ex.CatalogError)
async def catalog_exception_handler(request: Request, exc: ex.CatalogError):
  log.warning(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
  return JSONResponse(
    status_code=exc.status_code,
    content={"detail": exc.message},
  )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
  log.error(f"Global Exception Unhandled Exception: {exc}", exc_info=True)
  return JSONResponse(
    status_code=500,
    content={"detail": "Internal Server Error"},
  )
