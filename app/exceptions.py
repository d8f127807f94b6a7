# app/exceptions.py

class CatalogError(Exception):
  """Catalog errors which carry the HTTP status code of the response"""
  status_code = 500

  def __init__(self, message: str = None, status_code: int = None):
    self.message = message or "Catalog error"
    if status_code is not None:
      self.status_code = status_code
    super().__init__(self.message)

class ProductNotFoundError(CatalogError):
  """Single product lookup failed"""
  status_code = 404

  def __init__(self, message: str = "Product not found!"):
    super().__init__(message)

class ProductsNotFoundError(CatalogError):
  """List/search returned nothing"""
  status_code = 404

  def __init__(self, message: str = "Products not found!"):
    super().__init__(message)

class ProductAlreadyReviewedError(CatalogError):
  status_code = 400

  def __init__(self, message: str = "Product already reviewed"):
    super().__init__(message)

class InvalidSourceError(CatalogError):
  """Unknown external sync source"""
  status_code = 400

  def __init__(self, source: str = None):
    self.source = source
    super().__init__("Invalid API source")

class NotAuthorizedError(CatalogError):
  status_code = 401

  def __init__(self, message: str = "Not authorized, no user"):
    super().__init__(message)


class ExternalSourceError(Exception):
  """All external product source errors"""
  pass

class ExternalSourceTimeoutError(ExternalSourceError):
  """Request timeout error raise"""
  pass

class ExternalSourceConnectionError(ExternalSourceError):
  """Connection error raise"""

class ExternalSourceHTTPError(ExternalSourceError):
  """HTTP statuse code 400-499 or 500-599 raise"""
  def __init__(self, status_code: int, message: str = None):
    self.status_code = status_code
    self.message = message or f"HTTP error {status_code}"
    super().__init__(self.message)

class ExternalSourceParsingError(ExternalSourceError):
  """Response body is not the expected JSON"""
  pass

class ExternalSourceConfigError(ExternalSourceError):
  """Source needs credentials or setup that is missing"""
  pass
