"""User Management API.

A CRUD API for user records protected by bearer token authentication.
"""

__version__ = "0.1.0"

from usermanagement.infrastructure.api.app import app

__all__ = ["app", "__version__"]
