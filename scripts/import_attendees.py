"""
Import attendees from an HR roster CSV.

Usage:
    python scripts/import_attendees.py roster.csv
"""
import argparse
import asyncio
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from eventsite.app.core.logging import setup_logging
from eventsite.app.db.async_session import close_async_engine, get_async_session
from eventsite.app.db.init_db import create_all_tables
from eventsite.app.services.attendee_import import import_attendees, read_attendee_csv


async def run_import(path: Path) -> int:
    records = read_attendee_csv(path.read_bytes())

    await create_all_tables()
    try:
        async with get_async_session() as session:
            summary = await import_attendees(session, records)
    finally:
        await close_async_engine()

    print(summary)
    for reason, count in sorted(summary.reasons.items()):
        print(f"  {reason}: {count}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import attendees from a roster CSV")
    parser.add_argument("csv_path", type=Path, help="Path to the roster CSV file")
    args = parser.parse_args(argv)

    if not args.csv_path.is_file():
        parser.error(f"File not found: {args.csv_path}")

    setup_logging()
    return asyncio.run(run_import(args.csv_path))


if __name__ == "__main__":
    sys.exit(main())
