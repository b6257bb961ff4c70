"""
Ride risk assessments and their hazard items.
"""

from . import models, schemas  # noqa: F401
