"""
Transactional email (log + provider), plain-text templates, scheduled
reminders and in-app notifications.
"""

from . import models, schemas  # noqa: F401
