"""
Month calendar built at read time from checks, maintenance, document
expiries, NDT schedules and inspection schedules.
"""

from . import schemas  # noqa: F401
