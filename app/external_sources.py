# app/external_sources.py

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import List, Optional
from app import config
from app.logger import get_logger
import app.exceptions as ex

# Get the logger for this module. Its name will be 'app.external_sources'.
log = get_logger(__name__)

FAKESTORE_URL = "https://fakestoreapi.com/products"
BESTBUY_URL = "https://api.bestbuy.com/v1/products"
BESTBUY_LAPTOPS_CATEGORY = "abcat0502000"

headers = {
  "Accept": "application/json",
  "User-Agent": "product-catalog-sync/1.0"
}

### Retry configurations
# Session object
session = requests.session()
# Retry strategy, off unless EXTERNAL_FETCH_RETRIES is set
retries = Retry(total=config.EXTERNAL_FETCH_RETRIES, backoff_factor=1, status_forcelist=[500, 502, 503, 504], raise_on_status=False)
# HTTP and HTTPS mount
session.mount("https://", HTTPAdapter(max_retries=retries))
session.mount("http://", HTTPAdapter(max_retries=retries))


def get_json(url: str, params: Optional[dict] = None, source: str = "external"):
  """
  Single GET against an external product API.

  Raises:
    ExternalSourceTimeoutError, ExternalSourceConnectionError,
    ExternalSourceHTTPError, ExternalSourceParsingError, ExternalSourceError
  """
  log.debug(f"[{source}] GET {url}")
  try:
    response = session.get(url, params=params, headers=headers, timeout=config.EXTERNAL_FETCH_TIMEOUT)
    response.raise_for_status()
  except requests.exceptions.Timeout as e:
    raise ex.ExternalSourceTimeoutError(f"Request to {source} timed out: {e}")
  except requests.exceptions.ConnectionError as e:
    raise ex.ExternalSourceConnectionError(f"Connection error for {source}: {e}")
  except requests.exceptions.HTTPError as e:
    status_code = e.response.status_code if e.response is not None else None
    raise ex.ExternalSourceHTTPError(status_code=status_code, message=f"{source} returned HTTP {status_code}")
  except requests.exceptions.RequestException as e:
    raise ex.ExternalSourceError(f"Generic request failure for {source}: {e}")

  log.info(f"[{source}] Fetched {url} (Status: {response.status_code})")
  try:
    return response.json()
  except ValueError as e:
    raise ex.ExternalSourceParsingError(f"{source} returned invalid JSON: {e}")


def _product_items(items, source: str) -> List[dict]:
  """Drop payload items that are not product objects"""
  products = [item for item in items if isinstance(item, dict)]
  dropped = len(items) - len(products)
  if dropped:
    log.warning(f"[{source}] Dropped {dropped} malformed items from payload")
  return products


def fetch_from_fakestore(category: Optional[str], limit: int) -> List[dict]:
  """
  Fake Store API products, keeping electronics and laptop/computer titles.

  The requested category is not used, imported products are always labelled
  'Electronics'.

  Args:
    category (Optional[str]): Ignored by this source
    limit (int): Number of products requested from the API
  """
  payload = get_json(FAKESTORE_URL, params={"limit": limit}, source="fakestore")
  if not isinstance(payload, list):
    raise ex.ExternalSourceParsingError("fakestore returned a non-list payload")
  if category and category.lower() != "electronics":
    log.info(f"[fakestore] Category '{category}' ignored, keeping electronics only")

  products = _product_items(payload, "fakestore")
  kept = list()
  for product in products:
    title = product.get("title")
    title = title.lower() if isinstance(title, str) else ""
    if product.get("category") == "electronics" or "laptop" in title or "computer" in title:
      kept.append(product)

  log.info(f"[fakestore] Kept {len(kept)} of {len(payload)} products")
  return kept


def fetch_from_bestbuy(category: Optional[str], limit: int) -> List[dict]:
  """Best Buy laptops, needs BESTBUY_API_KEY"""
  api_key = config.BESTBUY_API_KEY
  if not api_key:
    raise ex.ExternalSourceConfigError("Best Buy API key not configured")

  params = {
    "format": "json",
    "apiKey": api_key,
    "show": "name,price,description,image,rating",
    "pageSize": limit,
    "categoryPath.id": BESTBUY_LAPTOPS_CATEGORY
  }
  data = get_json(BESTBUY_URL, params=params, source="bestbuy")
  if not isinstance(data, dict):
    raise ex.ExternalSourceParsingError("bestbuy returned a non-object payload")

  products = data.get("products") or []
  if not isinstance(products, list):
    raise ex.ExternalSourceParsingError("bestbuy returned 'products' that is not a list")
  return _product_items(products, "bestbuy")


def fetch_from_amazon(category: Optional[str], limit: int) -> List[dict]:
  # Product Advertising API needs access key, secret key and associate tag
  raise ex.ExternalSourceConfigError("Amazon API integration requires additional setup")


FETCHERS = {
  "fakestore": fetch_from_fakestore,
  "bestbuy": fetch_from_bestbuy,
  "amazon": fetch_from_amazon,
}


def fetch_external_products(source: str, category: Optional[str], limit: int) -> List[dict]:
  """
  Fetch raw products from a source. Any fetch failure is logged and yields [].

  Raises:
    InvalidSourceError: Unknown source name
  """
  fetcher = FETCHERS.get(source)
  if fetcher is None:
    log.warning(f"Invalid API source requested: '{source}'")
    raise ex.InvalidSourceError(source)

  try:
    return fetcher(category, limit)
  except ex.ExternalSourceHTTPError as e:
    log.error(f"[SYNC] HTTPError ({e.status_code}) fetching from {source}: {e.message}")
  except ex.ExternalSourceError as e:
    log.error(f"[SYNC] Error fetching from {source}: {e}")
  return []
