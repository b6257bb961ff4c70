"""
Ride inventory and the admin-managed ride categories.
"""

from . import models, schemas  # noqa: F401
