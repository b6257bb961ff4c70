"""Technical bulletin scrape.

Pulls the configured bulletin sources and upserts on bulletin number, so
repeated runs update rather than duplicate.
"""

from __future__ import annotations

from showdb.apps.bulletins import scraper
from showdb.database import session_scope


def run() -> dict:
    with session_scope() as db:
        result = scraper.run_scrape(db)
        return {"success": result.success, "message": result.message, "bulletins": len(result.bulletins)}


if __name__ == "__main__":
    print("Bulletin scrape completed:", run())
