"""Import a browser-storage export of the web version into the SQLite store.

The export is a JSON object whose keys are the storage slot names and whose
values are the stored strings (or the already-parsed arrays)::

    {"ys_gallery_images": "[\"data:image/jpeg;base64,...\"]",
     "ys_date_suggestions": "[{\"id\": \"1707\", ...}]"}

Slots that fail to decode are reported and left untouched.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List

from ourstory import db, store


async def migrate(export_path: Path) -> Dict[str, int]:
    """Import every known slot from *export_path*; return item counts per key."""
    with export_path.open("r", encoding="utf-8") as f:
        export = json.load(f)
    if not isinstance(export, dict):
        raise ValueError("Export must be a JSON object")

    await db.init_db()
    imported: Dict[str, int] = {}
    for key, slot in store.SLOTS.items():
        if key not in export:
            continue
        raw = export[key]
        payload = raw if isinstance(raw, str) else json.dumps(raw)
        try:
            items = store.decode_payload(slot, payload)
        except (ValueError, TypeError, KeyError) as exc:
            print(f"skip {key}: {exc}", file=sys.stderr)
            continue
        await store.save(slot, items)
        imported[key] = len(items)
    return imported


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("export", type=Path, help="JSON export of browser storage")
    args = parser.parse_args(argv)
    counts = asyncio.run(migrate(args.export))
    for key, count in counts.items():
        print(f"{key}: {count} item(s)")
    keys = asyncio.run(db.list_collection_keys())
    print(f"store now holds: {', '.join(keys) or '(nothing)'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
