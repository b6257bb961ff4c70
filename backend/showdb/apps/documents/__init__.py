"""
Compliance documents: blob storage, version control and the send flow.
"""

from . import models, schemas  # noqa: F401
