#!/usr/bin/env python3
"""Apply the product listing index migration (PostgreSQL only)."""
import sys
from pathlib import Path

# Add parent directory to path to import storefront modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text
from storefront.database import engine


def read_statements(migration_sql: Path) -> list[str]:
    """Split a SQL script into statements, dropping comments and blank lines."""
    statements = []
    current_statement = []

    for line in migration_sql.read_text().split('\n'):
        line = line.strip()
        if not line or line.startswith('--'):
            continue
        current_statement.append(line)
        if line.endswith(';'):
            statements.append(' '.join(current_statement))
            current_statement = []

    return statements


def run_migration():
    """Execute the listing index migration SQL script."""
    if engine.dialect.name != "postgresql":
        print(f"Skipping migration: indexes target PostgreSQL, not {engine.dialect.name}")
        return

    statements = read_statements(Path(__file__).parent / "add_listing_indexes.sql")

    with engine.begin() as conn:
        for statement in statements:
            print(f"Executing: {statement[:80]}...")
            conn.execute(text(statement))
        print("Migration completed successfully!")


if __name__ == "__main__":
    try:
        run_migration()
    except Exception as e:
        print(f"Migration failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
