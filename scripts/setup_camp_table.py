# =============================================================================
# scripts/setup_camp_table.py
# Setup script for the election camp document table in Supabase
# =============================================================================
"""
Run this script to:
1. Print the SQL that creates the election_camp_data table
2. Upload the bundled seed regions as the shared document (if missing)

Usage:
    python scripts/setup_camp_table.py            # create document if missing
    python scripts/setup_camp_table.py --sql      # only print the SQL
    python scripts/setup_camp_table.py --reset    # overwrite document with seed

Prerequisites:
    - Configure .streamlit/secrets.toml with Supabase credentials
      (or SUPABASE_URL / SUPABASE_KEY)
    - Run the printed SQL in the Supabase SQL Editor first
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from camp_core.config import DEFAULT_DOCUMENT_ID, load_config
from camp_core.data.remote_store import RemoteDocumentStore
from camp_core.data.seed import SeedLoader
from camp_core.data.supabase_client import get_supabase_client
from camp_core.logging import setup_logging
from camp_core.models.entities import count_entities

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id            TEXT PRIMARY KEY,
    regions       JSONB NOT NULL DEFAULT '[]'::jsonb,
    last_updated  TIMESTAMPTZ NOT NULL DEFAULT now(),
    version       TEXT NOT NULL DEFAULT '1.0'
);

ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;

-- Every client reads and writes the one shared document
DROP POLICY IF EXISTS "camp document access" ON {table};
CREATE POLICY "camp document access" ON {table}
    FOR ALL USING (id = '{document_id}') WITH CHECK (id = '{document_id}');
"""


def print_sql(table: str, document_id: str) -> None:
    print("\n-- Run in the Supabase SQL Editor:")
    print(CREATE_TABLE_SQL.format(table=table, document_id=document_id))


def main() -> int:
    parser = argparse.ArgumentParser(description="Set up the election camp document table")
    parser.add_argument("--sql", action="store_true", help="Only print the table SQL")
    parser.add_argument("--reset", action="store_true", help="Overwrite the document with the seed")
    args = parser.parse_args()

    setup_logging(log_to_file=False)
    config = load_config()

    print("=" * 60)
    print("ELECTION CAMP DOCUMENT SETUP")
    print("=" * 60)
    print_sql(config.table, config.document_id or DEFAULT_DOCUMENT_ID)

    if args.sql:
        return 0

    client = get_supabase_client(config)
    if client is None:
        print("ERROR: Missing Supabase credentials.")
        print()
        print("Option 1: Configure .streamlit/secrets.toml:")
        print('  [supabase]')
        print('  url = "https://your-project.supabase.co"')
        print('  key = "your-anon-key"')
        print()
        print("Option 2: Set environment variables:")
        print("  SUPABASE_URL and SUPABASE_KEY")
        return 1

    print(f"Using Supabase URL: {config.supabase_url[:40]}...")
    remote = RemoteDocumentStore(
        client,
        SeedLoader(url=config.seed_url),
        table=config.table,
        document_id=config.document_id,
    )

    try:
        if args.reset:
            print("\n[1/2] Overwriting document with seed data...")
            regions = remote.reset()
        else:
            print("\n[1/2] Creating document from seed data if missing...")
            regions = remote.initialize()

        print("\n[2/2] Verifying...")
        if not remote.exists():
            print("ERROR: Document table is not reachable. Did you run the SQL?")
            return 1

        counts = count_entities(regions)
        print(
            f"      {counts['regions']} regions, {counts['unions']} unions, "
            f"{counts['wards']} wards, {counts['persons']} persons"
        )
        print("\nDone.")
        return 0
    finally:
        remote.close()


if __name__ == "__main__":
    sys.exit(main())
