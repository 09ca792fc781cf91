"""FastAPI dependencies shared by the API routers."""

from .auth import AuthContext, require_api_key

__all__ = ["AuthContext", "require_api_key"]
