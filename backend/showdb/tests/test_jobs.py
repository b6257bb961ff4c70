from contextlib import contextmanager
from datetime import date

import pytest

from showdb import database
from showdb.apps.bulletins import schemas as bulletin_schemas
from showdb.apps.bulletins import scraper
from showdb.apps.notifications import reminders
from showdb.jobs import bulletin_scrape, document_expiry_reminders, inspection_reminders


def _scope_for(db):
    @contextmanager
    def _scope():
        yield db
        db.commit()

    return _scope


def test_document_expiry_job_returns_counts(db_session, monkeypatch):
    monkeypatch.setattr(document_expiry_reminders, "session_scope", _scope_for(db_session))

    result = document_expiry_reminders.run(today=date(2026, 3, 1))

    assert result == {"emails_sent": 0, "emails_failed": 0, "skipped": 0, "total": 0, "errors": []}


def test_inspection_job_passes_today(db_session, monkeypatch):
    seen = {}

    def _fake(db, *, today=None):
        seen["today"] = today
        return reminders.ReminderRunResult(emails_sent=2, total=2)

    monkeypatch.setattr(inspection_reminders, "session_scope", _scope_for(db_session))
    monkeypatch.setattr(reminders, "send_inspection_reminders", _fake)

    result = inspection_reminders.run(today=date(2026, 3, 1))

    assert seen["today"] == date(2026, 3, 1)
    assert result["emails_sent"] == 2


def test_bulletin_scrape_job_summarises(db_session, monkeypatch):
    monkeypatch.setattr(bulletin_scrape, "session_scope", _scope_for(db_session))
    monkeypatch.setattr(
        scraper,
        "run_scrape",
        lambda db: bulletin_schemas.ScrapeResult(success=True, message="Scraped and stored 0 technical bulletins"),
    )

    assert bulletin_scrape.run() == {
        "success": True,
        "message": "Scraped and stored 0 technical bulletins",
        "bulletins": 0,
    }


def test_session_scope_rolls_back_on_error(monkeypatch):
    events = []

    class _Session:
        def commit(self):
            events.append("commit")

        def rollback(self):
            events.append("rollback")

        def close(self):
            events.append("close")

    monkeypatch.setattr(database, "WriteSessionLocal", _Session)

    with pytest.raises(RuntimeError):
        with database.session_scope():
            raise RuntimeError("boom")
    assert events == ["rollback", "close"]

    events.clear()
    with database.session_scope():
        pass
    assert events == ["commit", "close"]
