# backend/showdb/apps/bulletins/scraper.py
"""
Technical bulletin scraper.

Two fixed industry pages are fetched through the Firecrawl scrape API,
which returns the page as markdown. The markdown is split into bulletin
chunks with simple patterns, each chunk gets a title, a bulletin number
and a priority, and the result is upserted on `bulletin_number` with a
category chosen by the matcher.

Extraction quality is whatever the markdown gives us; nothing here tries
to be clever about page structure.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from showdb.apps.rides import models as ride_models

from . import matcher, models, schemas

logger = logging.getLogger(__name__)

FIRECRAWL_API_URL = os.getenv("FIRECRAWL_API_URL", "https://api.firecrawl.dev/v1/scrape")
FIRECRAWL_API_KEY = os.getenv("FIRECRAWL_API_KEY", "")
ADIPS_URL = os.getenv("BULLETIN_SOURCE_ADIPS_URL", "https://adips.co.uk/new-technical-bulletins-available/")
RIDESDB_URL = os.getenv("BULLETIN_SOURCE_RIDESDB_URL", "https://ridesdatabase.org/safety-bulletins")
SCRAPE_TIMEOUT_SEC = int(os.getenv("BULLETIN_SCRAPE_TIMEOUT_SEC", "60"))

ADIPS_PROMPT = (
    "Extract technical bulletins with title, bulletin number, issue date, content, and priority level "
    "(high/medium/low). Include any ride category information."
)
RIDESDB_PROMPT = (
    "Extract safety bulletins and technical information with title, date, content, and any ride type "
    "or category information."
)

_ADIPS_CHUNK_RE = re.compile(
    r"(?:bulletin|technical\s+bulletin)\s*[#:]?\s*([^:\n]+)[\s\S]*?(?=(?:bulletin|technical\s+bulletin)|\Z)",
    re.IGNORECASE,
)
_ADIPS_NUMBER_RE = re.compile(r"(?:TB|BULLETIN)\s*[#:]?\s*(\d+)", re.IGNORECASE)
_ADIPS_HIGH_RE = re.compile(r"urgent|critical|immediate", re.IGNORECASE)
_ADIPS_LOW_RE = re.compile(r"info|information|note", re.IGNORECASE)

_RIDESDB_CHUNK_RE = re.compile(
    r"(?:safety\s+bulletin|alert|notice)\s*[#:]?\s*([^:\n]+)[\s\S]*?(?=(?:safety\s+bulletin|alert|notice)|\Z)",
    re.IGNORECASE,
)
_RIDESDB_NUMBER_RE = re.compile(r"(?:SB|SAFETY|ALERT)\s*[#:]?\s*(\d+)", re.IGNORECASE)
_RIDESDB_HIGH_RE = re.compile(r"urgent|critical|warning|danger", re.IGNORECASE)


class ScrapeError(RuntimeError):
    pass


def _now_ms() -> int:
    return int(time.time() * 1000)


def _chunk_title(chunk: str, fallback: str) -> str:
    lines = [line for line in chunk.split("\n") if line.strip()]
    if lines:
        title = re.sub(r"[#*]", "", lines[0]).strip()
        if title:
            return title
    return fallback


# ---------------------------------------------------------------------------
# Markdown parsing
# ---------------------------------------------------------------------------


def parse_adips_bulletins(markdown: str, *, now_ms: Optional[int] = None) -> List[schemas.ScrapedBulletin]:
    stamp = now_ms if now_ms is not None else _now_ms()
    bulletins: List[schemas.ScrapedBulletin] = []

    for index, found in enumerate(_ADIPS_CHUNK_RE.finditer(markdown or "")):
        chunk = found.group(0)
        number = _ADIPS_NUMBER_RE.search(chunk)
        bulletin_number = f"ADIPS-{number.group(1)}" if number else f"ADIPS-{stamp}-{index}"

        # Low wins over high when both appear, as on the source site.
        priority = models.BulletinPriority.MEDIUM
        if _ADIPS_HIGH_RE.search(chunk):
            priority = models.BulletinPriority.HIGH
        if _ADIPS_LOW_RE.search(chunk):
            priority = models.BulletinPriority.LOW

        bulletins.append(
            schemas.ScrapedBulletin(
                title=_chunk_title(chunk, f"ADIPS Bulletin {index + 1}"),
                content=chunk.strip(),
                bulletin_number=bulletin_number,
                priority=priority,
                source="ADIPS",
            )
        )
    return bulletins


def parse_rides_db_bulletins(markdown: str, *, now_ms: Optional[int] = None) -> List[schemas.ScrapedBulletin]:
    stamp = now_ms if now_ms is not None else _now_ms()
    bulletins: List[schemas.ScrapedBulletin] = []

    for index, found in enumerate(_RIDESDB_CHUNK_RE.finditer(markdown or "")):
        chunk = found.group(0)
        number = _RIDESDB_NUMBER_RE.search(chunk)
        bulletin_number = f"RDB-{number.group(1)}" if number else f"RDB-{stamp}-{index}"
        priority = (
            models.BulletinPriority.HIGH
            if _RIDESDB_HIGH_RE.search(chunk)
            else models.BulletinPriority.MEDIUM
        )

        bulletins.append(
            schemas.ScrapedBulletin(
                title=_chunk_title(chunk, f"Safety Bulletin {index + 1}"),
                content=chunk.strip(),
                bulletin_number=bulletin_number,
                priority=priority,
                source="RidesDatabase",
            )
        )
    return bulletins


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


def _post_scrape(url: str, prompt: str) -> Tuple[int, dict]:
    import urllib.request

    payload = {
        "url": url,
        "formats": ["markdown"],
        "extractorOptions": {"mode": "llm-extraction", "extractionPrompt": prompt},
    }
    req = urllib.request.Request(FIRECRAWL_API_URL, data=json.dumps(payload).encode("utf-8"), method="POST")
    req.add_header("Content-Type", "application/json")
    req.add_header("Authorization", f"Bearer {FIRECRAWL_API_KEY}")
    with urllib.request.urlopen(req, timeout=SCRAPE_TIMEOUT_SEC) as resp:
        body = resp.read().decode("utf-8")
        return resp.status, json.loads(body or "{}")


def fetch_markdown(url: str, prompt: str) -> Optional[str]:
    """
    Markdown for `url`, or None when the scrape API reports no content.

    Transport errors propagate; the caller reports them as a failed run.
    """
    if not FIRECRAWL_API_KEY:
        raise ScrapeError("FIRECRAWL_API_KEY is not configured")

    status_code, data = _post_scrape(url, prompt)
    logger.info("bulletin source scraped", extra={"url": url, "status": status_code, "success": data.get("success")})
    if not data.get("success"):
        return None
    return (data.get("data") or {}).get("markdown") or None


def scrape_sources() -> List[schemas.ScrapedBulletin]:
    bulletins: List[schemas.ScrapedBulletin] = []

    adips_markdown = fetch_markdown(ADIPS_URL, ADIPS_PROMPT)
    rides_db_markdown = fetch_markdown(RIDESDB_URL, RIDESDB_PROMPT)

    if adips_markdown:
        bulletins.extend(parse_adips_bulletins(adips_markdown))
    if rides_db_markdown:
        bulletins.extend(parse_rides_db_bulletins(rides_db_markdown))

    logger.info("bulletins parsed from sources", extra={"count": len(bulletins)})
    return bulletins


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


def ingest_bulletins(
    db: Session,
    scraped: List[schemas.ScrapedBulletin],
    *,
    today: Optional[date] = None,
) -> List[models.TechnicalBulletin]:
    """
    Upsert scraped bulletins on `bulletin_number`.

    A bulletin that fails to store is logged and skipped; the rest of the
    batch still goes in. The caller commits.
    """
    categories = (
        db.query(ride_models.RideCategory)
        .order_by(ride_models.RideCategory.name.asc())
        .all()
    )
    if not categories:
        raise LookupError("No ride categories found")

    issue_date = today or date.today()
    stored: List[models.TechnicalBulletin] = []

    for item in scraped:
        category_id = matcher.get_best_category_for_bulletin(item, categories) or categories[0].id
        try:
            with db.begin_nested():
                row = (
                    db.query(models.TechnicalBulletin)
                    .filter(models.TechnicalBulletin.bulletin_number == item.bulletin_number)
                    .first()
                )
                if row is None:
                    row = models.TechnicalBulletin(bulletin_number=item.bulletin_number)
                    db.add(row)
                row.title = item.title
                row.content = item.content
                row.priority = item.priority or models.BulletinPriority.MEDIUM
                row.category_id = category_id
                row.issue_date = issue_date
                db.flush()
        except Exception as exc:
            logger.warning(
                "Failed to store scraped bulletin",
                extra={"bulletin_number": item.bulletin_number, "error": str(exc)},
            )
            continue
        stored.append(row)

    logger.info("scraped bulletins stored", extra={"stored": len(stored), "parsed": len(scraped)})
    return stored


def run_scrape(db: Session) -> schemas.ScrapeResult:
    stored = ingest_bulletins(db, scrape_sources())
    return schemas.ScrapeResult(
        success=True,
        message=f"Scraped and stored {len(stored)} technical bulletins",
        bulletins=[schemas.TechnicalBulletinRead.model_validate(row) for row in stored],
    )
