# backend/showdb/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- The package exposes a clear surface.

The actual model classes are kept in showdb/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models            # users / profiles
from .apps.rides import models as rides_models                  # rides + categories
from .apps.bulletins import models as bulletins_models          # technical bulletins
from .apps.documents import models as documents_models          # versioned documents
from .apps.maintenance import models as maintenance_models      # records, checks, schedules
from .apps.risk import models as risk_models                    # risk assessments
from .apps.notifications import models as notifications_models  # email log + in-app
from .apps.support import models as support_models              # support inbox

__all__ = [
    "accounts_models",
    "rides_models",
    "bulletins_models",
    "documents_models",
    "maintenance_models",
    "risk_models",
    "notifications_models",
    "support_models",
]
