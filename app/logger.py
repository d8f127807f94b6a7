# app/logger.py

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
import json
from datetime import datetime, timezone

from app import config


# Custom JSON Formatter
class JsonFormatter(logging.Formatter):
  def format(self, record):
    log_record = {
      "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
      "level": record.levelname,
      "logger": record.name,
      "message": record.getMessage(),
      "file": record.pathname,
      "line": record.lineno,
      "function": record.funcName
    }

    if record.exc_info:
      log_record["exception"] = self.formatException(record.exc_info)

    return json.dumps(log_record, default=str)


json_formatter = JsonFormatter()

def configure_logging(env: str = None):
  """
  Configure the root logger for the catalog service.

  Console gets ERROR and above, the rotating file gets everything allowed by
  the environment: logs/test.log while testing, logs/app.log otherwise.

  Args:
    env: str : Overrides APP_ENV ('development', 'testing', 'production')
  """
  env = env or os.getenv("APP_ENV", config.APP_ENV)

  app_log_file = os.path.join(config.LOG_DIR, "app.log")
  test_log_file = os.path.join(config.LOG_DIR, "test.log")

  os.makedirs(config.LOG_DIR, exist_ok=True)

  # Root logger
  logger = logging.getLogger()
  if env in ("testing", "development"):
    logger.setLevel(logging.DEBUG)
  else: # production
    logger.setLevel(logging.INFO)

  # Clear previous handler
  if logger.hasHandlers():
    logger.handlers.clear()

  # --- Console (stdout) logger ---
  console_handler = logging.StreamHandler(sys.stdout)
  console_handler.setFormatter(json_formatter)
  console_handler.setLevel(logging.ERROR)
  logger.addHandler(console_handler)

  if env == "testing":
    file_handler = RotatingFileHandler(test_log_file, maxBytes=1*1024*1024, backupCount=1, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
  else:
    file_handler = RotatingFileHandler(app_log_file, maxBytes=5*1024*1024, backupCount=3, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
  file_handler.setFormatter(json_formatter)
  logger.addHandler(file_handler)


def get_logger(name):
  """
  Returns a logger object with specific name.
  Before call this function configure_logging() must be called.
  """
  return logging.getLogger(name)
