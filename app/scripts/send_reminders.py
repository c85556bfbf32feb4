#!/usr/bin/env python3
"""
Script to send the reminders due today
Usage: python -m app.scripts.send_reminders [--dry-run]
With --dry-run nothing is sent or recorded, the messages are only printed
"""
import sys

from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.schemas.reminders import DispatchStatus
from app.services.reminders.dispatch_service import run_dispatch
from app.utils.my_logging import setup_logging


def send_reminders(dry_run: bool = False) -> bool:
    db: Session = SessionLocal()

    try:
        print(f"\n📨 Reminder dispatch{' [DRY RUN]' if dry_run else ''}")
        print("=" * 60)

        report = run_dispatch(db, dry_run=dry_run)
        if report.run_error:
            print(f"❌ Error ({report.run_error.kind}): {report.run_error.message}")
            return False

        for window in report.windows:
            print(f"\n[{window.label}] {window.window_start:%Y-%m-%d %H:%M} -> {window.window_end:%Y-%m-%d %H:%M} UTC")
            for outcome in window.outcomes:
                target = outcome.phone or "-"
                line = f"  {outcome.status.value:8} #{outcome.appointment_id} {target}"
                if outcome.status == DispatchStatus.DRY_RUN:
                    line += f'  "{outcome.message}"'
                elif outcome.error:
                    line += f"  ({outcome.error})"
                print(line)
            print(f"  {window.summary}")

        failed = [o for o in report.outcomes if o.status == DispatchStatus.FAILED]
        print("\n" + "=" * 60)
        print(f"{'✅' if not failed else '⚠️ '} {len(report.outcomes)} processed, {len(failed)} failed")
        return not failed

    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    sys.exit(0 if send_reminders(dry_run="--dry-run" in sys.argv[1:]) else 1)
