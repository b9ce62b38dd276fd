# -*- coding: utf-8 -*-
"""Application logic that composes the store, codec and gate layers.

This module provides the public API used by the UI. It does not contain any
Textual UI code. All side effects (DB + config I/O) are explicit and local.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union
from dataclasses import dataclass, field
from pathlib import Path
from datetime import date
import json
import logging
import os
import secrets

from . import db, store
from .codec import ImageDecodeError, compress
from .content import StoryContent, load_content
from .gate import Gate, GateSecrets
from .models import LOCATION_PLACEHOLDER, DateSuggestion, Role

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Config management (JSON on disk)
# ---------------------------------------------------------------------

APP_NAME = "ourstory"

DEFAULT_CONFIG: Dict[str, object] = {
    "unlock_delay_seconds": 3.5,
    "max_image_width": 800,
    "image_quality": 0.7,
}

# Only ever written to disk as hashes (see _seed_gate).
DEFAULT_GATE_ANSWERS = {
    "year": "2022",
    Role.STANDARD.value: "grenoble",
    Role.ELEVATED.value: "madurai",
}

def _config_dir() -> Path:
    """Return the config directory path for this platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base) / APP_NAME

def _config_path() -> Path:
    return _config_dir() / "config.json"

def content_path() -> Path:
    return _config_dir() / "content.json"

def _seed_gate() -> Dict[str, object]:
    secrets_ = GateSecrets.from_answers(
        DEFAULT_GATE_ANSWERS["year"],
        DEFAULT_GATE_ANSWERS[Role.STANDARD.value],
        DEFAULT_GATE_ANSWERS[Role.ELEVATED.value],
    )
    return secrets_.to_config()

def load_config() -> Dict[str, object]:
    """Load the merged configuration (defaults + file).

    Missing gate hashes are seeded from the default answers and saved.
    """
    path = _config_path()
    data: Dict[str, object] = {}
    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be an object")
        except ValueError as exc:
            logger.error("Config %s is unreadable, using defaults: %s", path, exc)
            data = {}
    merged = json.loads(json.dumps(DEFAULT_CONFIG))
    merged.update(data)
    if not isinstance(merged.get("gate"), dict):
        logger.info("Seeding gate answers into %s", path)
        merged["gate"] = _seed_gate()
        save_config(merged)
    return merged

def save_config(cfg: Dict[str, object]) -> None:
    """Persist *cfg* to the JSON config file."""
    _config_dir().mkdir(parents=True, exist_ok=True)
    with _config_path().open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)

def set_gate_answers(year: str, standard: str, elevated: str) -> None:
    """Replace the stored gate hashes with hashes of new answers."""
    cfg = load_config()
    cfg["gate"] = GateSecrets.from_answers(year, standard, elevated).to_config()
    save_config(cfg)

def build_gate(cfg: Dict[str, object]) -> Gate:
    """Gate from the stored hashes; a malformed gate section is re-seeded."""
    try:
        return Gate(GateSecrets.from_config(cfg["gate"]))  # type: ignore[arg-type]
    except (KeyError, ValueError) as exc:
        logger.error("Gate config is invalid, restoring defaults: %s", exc)
        cfg["gate"] = _seed_gate()
        save_config(cfg)
        return Gate(GateSecrets.from_config(cfg["gate"]))  # type: ignore[arg-type]

def load_story_content() -> StoryContent:
    return load_content(content_path())


# ---------------------------------------------------------------------
# DB bridge
# ---------------------------------------------------------------------

async def init_db() -> None:
    """Initialize the SQLite database (create tables on first run)."""
    await db.init_db()


# ---------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------

@dataclass
class Collections:
    """In-memory copy of both persisted collections.

    Every mutator saves first and swaps the in-memory list only after the
    save returned, so memory and disk never disagree.
    """

    images: List[str] = field(default_factory=list)
    dates: List[DateSuggestion] = field(default_factory=list)
    max_image_width: int = 800
    image_quality: float = 0.7


async def load_collections(cfg: Optional[Dict[str, object]] = None) -> Collections:
    """Read both collections from the store (empty on corruption)."""
    cfg = cfg or DEFAULT_CONFIG
    return Collections(
        images=await store.load(store.GALLERY),
        dates=await store.load(store.DATES),
        max_image_width=int(cfg.get("max_image_width", 800)),  # type: ignore[arg-type]
        image_quality=float(cfg.get("image_quality", 0.7)),  # type: ignore[arg-type]
    )


async def add_image(cols: Collections, payload: str) -> None:
    """Append one already-encoded image."""
    images = cols.images + [payload]
    await store.save(store.GALLERY, images)
    cols.images = images


async def upload_images(cols: Collections, files: Iterable[Union[Path, str, bytes]]) -> int:
    """Compress each file in order and append the ones that decode.

    *files* may be paths or raw bytes. Returns the number of images added.
    """
    added: List[str] = []
    for item in files:
        try:
            raw = item if isinstance(item, bytes) else Path(item).expanduser().read_bytes()
            added.append(await compress(raw, cols.max_image_width, cols.image_quality))
        except (OSError, ImageDecodeError) as exc:
            label = "<bytes>" if isinstance(item, bytes) else str(item)
            logger.warning("Skipping %s: %s", label, exc)
    if added:
        images = cols.images + added
        await store.save(store.GALLERY, images)
        cols.images = images
    return len(added)


def _denied(role: Optional[Role], what: str) -> bool:
    if role is Role.ELEVATED:
        return False
    logger.warning("Permission denied: %s requires the elevated role", what)
    return True


async def delete_image(cols: Collections, role: Optional[Role], index: int) -> bool:
    """Remove the image at *index*. Elevated role only; out of range is a no-op."""
    if _denied(role, "deleting an image"):
        return False
    if not 0 <= index < len(cols.images):
        return False
    images = cols.images[:index] + cols.images[index + 1:]
    await store.save(store.GALLERY, images)
    cols.images = images
    return True


def _new_date_id(existing: Iterable[DateSuggestion]) -> str:
    taken = {d.id for d in existing}
    while True:
        token = secrets.token_hex(8)
        if token not in taken:
            return token


async def add_date(
    cols: Collections,
    name: str,
    location: Optional[str] = None,
) -> Optional[DateSuggestion]:
    """Insert a suggestion at the front; blank names are ignored (returns None)."""
    if not name.strip():
        return None
    suggestion = DateSuggestion(
        id=_new_date_id(cols.dates),
        name=name.strip(),
        location=(location or "").strip() or LOCATION_PLACEHOLDER,
        date_added=date.today().isoformat(),
        visited=False,
    )
    dates = [suggestion] + cols.dates
    await store.save(store.DATES, dates)
    cols.dates = dates
    return suggestion


async def toggle_visited(cols: Collections, date_id: str) -> bool:
    """Flip ``visited`` for *date_id*; unknown ids are a no-op. Any role."""
    if not any(d.id == date_id for d in cols.dates):
        return False
    dates = [
        DateSuggestion(d.id, d.name, d.location, d.date_added, not d.visited) if d.id == date_id else d
        for d in cols.dates
    ]
    await store.save(store.DATES, dates)
    cols.dates = dates
    return True


async def delete_date(cols: Collections, role: Optional[Role], date_id: str) -> bool:
    """Remove *date_id*. Elevated role only; unknown ids are a no-op."""
    if _denied(role, "deleting a date suggestion"):
        return False
    dates = [d for d in cols.dates if d.id != date_id]
    if len(dates) == len(cols.dates):
        return False
    await store.save(store.DATES, dates)
    cols.dates = dates
    return True
