"""Database reset script.

Drops the templates and render_jobs tables and recreates them empty.
Every imported template and render job is lost.

Usage:
    python -m scripts.reset_db
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import get_settings
from app.db.session import close_db, drop_all_tables, init_db


async def main() -> None:
    """Drop all tables and recreate them."""
    settings = get_settings()

    try:
        print("Dropping all database tables...")
        await drop_all_tables(settings)

        print("Recreating tables...")
        await init_db(settings)
    finally:
        await close_db(settings)

    print("Database reset successfully!")


if __name__ == "__main__":
    asyncio.run(main())
