"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all runs
  2. Other modules can import from codeshare.models directly
"""

from codeshare.models.user import User, UserRole  # noqa: F401
from codeshare.models.account import Account  # noqa: F401
from codeshare.models.resource import Resource  # noqa: F401
