"""Document expiry reminder run.

Run once a day from cron; a document is only picked up on the exact days
configured in DOCUMENT_EXPIRY_REMINDER_DAYS.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from showdb.apps.notifications import reminders
from showdb.database import session_scope


def run(today: date | None = None) -> dict:
    with session_scope() as db:
        return asdict(reminders.send_document_expiry_reminders(db, today=today))


if __name__ == "__main__":
    print("Document expiry reminders completed:", run())
