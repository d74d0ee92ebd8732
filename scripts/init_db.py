"""Database initialization script.

Creates the templates and render_jobs tables if they do not exist.

Usage:
    python -m scripts.init_db
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import get_settings
from app.db.session import close_db, init_db


async def main() -> None:
    """Create tables and report the number of imported templates."""
    settings = get_settings()
    try:
        await init_db(settings)
    finally:
        await close_db(settings)
    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
