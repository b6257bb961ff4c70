# backend/showdb/apps/accounts/__init__.py
"""
Accounts app: users mirrored from the auth provider and their profiles.

Only models and schemas are imported at package import time so that
Alembic can load metadata without pulling in routers.
"""

from . import models, schemas  # noqa: F401
