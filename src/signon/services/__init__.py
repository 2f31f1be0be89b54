"""Services backing the auth layer."""

from signon.services.user import find_user_by_uuid, save_user

__all__ = ["find_user_by_uuid", "save_user"]
