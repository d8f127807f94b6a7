# app/dependencies.py

from typing import Optional
from fastapi import Header
from app.models import CurrentUser
import app.exceptions as ex


def get_current_user(
  x_user_id: Optional[str] = Header(None, description="Authenticated user id, set by the auth layer"),
  x_user_name: Optional[str] = Header(None, description="Authenticated user display name")
  ) -> CurrentUser:
  """Requesting user as forwarded by the authentication layer in front of the API"""
  if not x_user_id:
    raise ex.NotAuthorizedError()
  return CurrentUser(id=x_user_id, name=x_user_name or "Anonymous")
