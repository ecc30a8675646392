"""
CSV Import Script for Events

Usage:
    python scripts/import_events.py <org-id> <path-to-csv>

CSV Format:
    name,timestamp,user_id,session_id,properties_json

Only `name` is required per row. Rows are written in batches of up to 1000;
each batch is committed atomically.
"""

import sys
import csv
import json
import asyncio
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.database import Database
from app.models.account import Organization
from app.schemas.event import EventCreate, MAX_BATCH_SIZE
from app.services.ingestion import IngestionService


def parse_row(row: dict) -> EventCreate:
    properties = {}
    if row.get('properties_json') and row['properties_json'].strip():
        properties = json.loads(row['properties_json'])

    return EventCreate(
        name=row['name'],
        timestamp=row.get('timestamp') or None,
        user_id=row.get('user_id') or None,
        session_id=row.get('session_id') or None,
        properties=properties
    )


async def import_csv(org_id: str, file_path: str, batch_size: int = MAX_BATCH_SIZE):
    """
    Import events from CSV file into one organization

    Args:
        org_id: Organization that will own the events
        file_path: Path to CSV file
        batch_size: Number of events to commit per transaction
    """
    file_path = Path(file_path)

    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    print(f"Starting import from: {file_path}")

    database = Database(settings.database_url)

    total_inserted = 0
    total_skipped = 0

    try:
        async with database.session_factory() as session:
            if await session.get(Organization, org_id) is None:
                print(f"Error: Organization not found: {org_id}")
                sys.exit(1)

            service = IngestionService(session)

            with open(file_path, 'r', encoding='utf-8') as f:
                reader = csv.DictReader(f)

                if not reader.fieldnames or 'name' not in reader.fieldnames:
                    print("Error: CSV must have a 'name' header")
                    print(f"Found headers: {reader.fieldnames}")
                    sys.exit(1)

                batch = []

                for i, row in enumerate(reader, 1):
                    try:
                        batch.append(parse_row(row))
                    except (ValidationError, json.JSONDecodeError) as e:
                        print(f"Skipping row {i}: {e}")
                        total_skipped += 1
                        continue

                    if len(batch) >= batch_size:
                        total_inserted += await service.ingest_events(org_id, batch)
                        print(f"Inserted: {total_inserted} | Skipped: {total_skipped}")
                        batch = []

                # Process remaining events
                if batch:
                    total_inserted += await service.ingest_events(org_id, batch)

    except SQLAlchemyError as e:
        print(f"Import aborted, current batch rolled back: {e}")
        sys.exit(1)
    finally:
        await database.dispose()

    print("\n" + "=" * 50)
    print("Import completed!")
    print(f"Total inserted: {total_inserted}")
    print(f"Total skipped: {total_skipped}")
    print("=" * 50)


def main():
    if len(sys.argv) != 3:
        print("Usage: python scripts/import_events.py <org-id> <path-to-csv>")
        sys.exit(1)

    asyncio.run(import_csv(sys.argv[1], sys.argv[2]))


if __name__ == "__main__":
    main()
