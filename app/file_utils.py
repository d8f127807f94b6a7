# app/file_utils.py

import os
from app import config
from app.logger import get_logger

log = get_logger(__name__)


def resolve_upload_path(file_path: str, upload_root: str = None):
  """
  Resolve a stored image reference (ex: '/uploads/image-1.jpg') to a path under upload root.

  Returns:
    str or None: Absolute path, None when the reference escapes the upload root
  """
  root = os.path.realpath(upload_root or config.UPLOAD_ROOT)
  target = os.path.realpath(os.path.join(root, file_path.lstrip("/\\")))
  if os.path.commonpath([root, target]) != root:
    return None
  return target


def delete_file(file_path: str, upload_root: str = None) -> bool:
  """
  Remove an uploaded image. Never raises, failures are logged.

  Args:
    file_path (str): Image reference stored on the product
    upload_root (str): Directory uploads live in, defaults to UPLOAD_ROOT

  Returns:
    bool: True if a file was removed
  """
  if not file_path:
    return False

  if file_path.startswith(("http://", "https://")):
    log.debug(f"Skipping delete of remote image: {file_path}")
    return False

  target = resolve_upload_path(file_path, upload_root)
  if target is None:
    log.warning(f"Refusing to delete file outside upload root: {file_path}")
    return False

  try:
    os.remove(target)
    log.info(f"Deleted file: {target}")
    return True
  except FileNotFoundError:
    log.warning(f"File to delete not found: {target}")
  except OSError as e:
    log.error(f"Error deleting file {target}: {e}")
  return False
