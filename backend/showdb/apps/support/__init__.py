"""
Support inbox: messages to the team and requests for new ride types,
document types and features.
"""

from . import models, schemas  # noqa: F401
