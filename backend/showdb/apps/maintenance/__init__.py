"""
Ride upkeep: maintenance log, check templates and submitted checks, dated
inspection schedules, NDT schedules and reports, annual inspection reports.
"""

from . import models, schemas  # noqa: F401
