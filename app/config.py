# app/config.py

import os

# Runtime environment: production, development, testing
APP_ENV = os.getenv("APP_ENV", "development")

# Database (SQLite file by default, any SQLAlchemy URL works)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///db/catalog.db")

# Pagination
PAGINATION_MAX_LIMIT = int(os.getenv("PAGINATION_MAX_LIMIT", "20"))

# Uploaded images are stored relative to this directory
UPLOAD_ROOT = os.getenv("UPLOAD_ROOT", ".")

# External product sources
BESTBUY_API_KEY = os.getenv("BESTBUY_API_KEY")
EXTERNAL_FETCH_TIMEOUT = float(os.getenv("EXTERNAL_FETCH_TIMEOUT", "10"))
EXTERNAL_FETCH_RETRIES = int(os.getenv("EXTERNAL_FETCH_RETRIES", "0"))
USD_TO_INR_RATE = float(os.getenv("USD_TO_INR_RATE", "83"))

# Catalog console -> API
API_URL = os.getenv("API_URL", "http://127.0.0.1:8000")

LOG_DIR = os.getenv("LOG_DIR", "logs")
