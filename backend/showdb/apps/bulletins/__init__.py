"""
Technical bulletins: storage, the ride relevance matcher and the scraper.

Only models and schemas are imported here; routers and the scraper pull
in the rides app and are loaded by main.py.
"""

from . import models, schemas  # noqa: F401
