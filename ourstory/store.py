# -*- coding: utf-8 -*-
"""Generic persisted collections on top of the SQLite ``collections`` table.

A :class:`Slot` names a key and how to turn one item into JSON and back.
``load`` never raises: anything unreadable degrades to an empty list.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, List, Sequence, TypeVar

import aiosqlite

from . import db
from .models import DateSuggestion

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Slot(Generic[T]):
    key: str
    encode: Callable[[T], object]
    decode: Callable[[object], T]


def _decode_image(raw: object) -> str:
    if not isinstance(raw, str) or not raw.startswith("data:image/"):
        raise ValueError("Gallery item is not an image data URL")
    return raw


GALLERY: Slot[str] = Slot("ys_gallery_images", encode=str, decode=_decode_image)
DATES: Slot[DateSuggestion] = Slot(
    "ys_date_suggestions",
    encode=DateSuggestion.to_dict,
    decode=DateSuggestion.from_dict,
)

SLOTS = {GALLERY.key: GALLERY, DATES.key: DATES}


def decode_payload(slot: Slot[T], payload: str) -> List[T]:
    """Parse a stored JSON array into items; raises on any malformed part."""
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError(f"{slot.key} payload is not a list")
    return [slot.decode(item) for item in data]


async def load(slot: Slot[T]) -> List[T]:
    """Return the stored items for *slot*, or [] if missing or unreadable."""
    try:
        payload = await db.get_collection_payload(slot.key)
    except aiosqlite.Error as exc:
        logger.error("Could not read %s: %s", slot.key, exc)
        return []
    if payload is None:
        return []
    try:
        return decode_payload(slot, payload)
    except (ValueError, TypeError, KeyError) as exc:
        logger.error("Discarding corrupt %s payload: %s", slot.key, exc)
        return []


async def save(slot: Slot[T], items: Sequence[T]) -> None:
    """Persist *items*; committed before this returns."""
    payload = json.dumps([slot.encode(item) for item in items], ensure_ascii=False)
    await db.put_collection_payload(
        slot.key, payload, datetime.now(timezone.utc).isoformat()
    )
