"""Inspection schedule reminder run.

Safe to run more than once a day: a schedule is mailed at most once per day.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from showdb.apps.notifications import reminders
from showdb.database import session_scope


def run(today: date | None = None) -> dict:
    with session_scope() as db:
        return asdict(reminders.send_inspection_reminders(db, today=today))


if __name__ == "__main__":
    print("Inspection reminders completed:", run())
