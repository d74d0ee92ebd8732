"""Template import script.

Imports a template from the rendering service without going through the
API, e.g. to seed a fresh database.

Usage:
    python -m scripts.import_template <template-id>
    python -m scripts.import_template --curl path/to/command.txt
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import get_settings
from app.core.factory import ComponentFactory
from app.db.session import close_db, get_session_maker, init_db
from app.interfaces.variables import TemplateIdNotFoundError, TemplateImportError


async def main(template_id: str | None, curl_path: Path | None, category: str | None) -> int:
    """Import one template and print its variables."""
    settings = get_settings()
    importer = ComponentFactory(settings).get_importer()
    curl_command = curl_path.read_text(encoding="utf-8") if curl_path else None

    try:
        await init_db(settings)
        async with get_session_maker(settings)() as session:
            template = await importer.import_template(
                session,
                template_id=template_id,
                curl_command=curl_command,
                category=category,
            )
    except (TemplateIdNotFoundError, TemplateImportError) as e:
        print(f"Import failed: {e}")
        return 1
    finally:
        await close_db(settings)

    print(f"Imported '{template.name}' as {template.id}")
    for key, value in sorted(template.variables.items()):
        print(f"  {key} = {value!r}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import a template from the rendering service")
    parser.add_argument("template_id", nargs="?", help="Rendering service template ID")
    parser.add_argument("--curl", type=Path, help="File containing a CURL command")
    parser.add_argument("--category", help="Category for the imported template")
    args = parser.parse_args()

    if not (args.template_id or args.curl):
        parser.error("Provide a template ID or --curl")

    sys.exit(asyncio.run(main(args.template_id, args.curl, args.category)))
