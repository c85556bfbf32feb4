#!/usr/bin/env python3
"""
Script to pull the Google calendar into the appointments table once
Usage: python -m app.scripts.sync_calendar
"""
import sys

from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.services.calendar.reconciliation_service import run_reconciliation
from app.utils.my_logging import setup_logging


def sync_calendar() -> bool:
    db: Session = SessionLocal()

    try:
        print("\n📅 Syncing appointments from Google Calendar")
        print("=" * 60)

        report = run_reconciliation(db)

        if report.run_error:
            print(f"❌ FAILED ({report.run_error.kind}): {report.run_error.message}")
            return False

        print(f"Created: {report.created}")
        print(f"Updated: {report.updated}")
        for error in report.errors:
            print(f"  ⚠️  {error.event_id}: {error.error}")

        print("\n" + "=" * 60)
        print(f"{'✅' if report.success else '⚠️ '} {report.message}")
        return report.success

    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    sys.exit(0 if sync_calendar() else 1)
