#! /usr/bin/python3
# -*- coding: utf-8 -*-
"""SQLite schema and async data access for Our Story."""
from __future__ import annotations

from typing import List, Optional
import os
import aiosqlite

DB_PATH = os.environ.get("OURSTORY_DB", "our_story.sqlite3")


# ---------------------------------------------------------------------
# Base schema (new installs)
# ---------------------------------------------------------------------

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS collections (
    key             TEXT PRIMARY KEY,
    -- JSON array of encoded items
    payload         TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);
"""


# ---------------------------------------------------------------------
# Connection / initialization
# ---------------------------------------------------------------------

async def init_db() -> None:
    """Create tables if they don't exist."""
    async with aiosqlite.connect(DB_PATH) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


# ---------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------

async def get_collection_payload(key: str) -> Optional[str]:
    """Return the stored JSON payload for *key*, or None if never saved."""
    async with aiosqlite.connect(DB_PATH) as db:
        db.row_factory = aiosqlite.Row
        cur = await db.execute(
            "SELECT payload FROM collections WHERE key = ?",
            (key,),
        )
        row = await cur.fetchone()
        await cur.close()
        return None if row is None else row["payload"]


async def put_collection_payload(key: str, payload: str, updated_at: str) -> None:
    """Insert or replace the payload for *key* in a single transaction."""
    async with aiosqlite.connect(DB_PATH) as db:
        await db.execute(
            """
            INSERT INTO collections (key, payload, updated_at)
                 VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE
                    SET payload = excluded.payload,
                        updated_at = excluded.updated_at
            """,
            (key, payload, updated_at),
        )
        await db.commit()


async def list_collection_keys() -> List[str]:
    """Return every stored collection key."""
    async with aiosqlite.connect(DB_PATH) as db:
        cur = await db.execute("SELECT key FROM collections ORDER BY key")
        rows = await cur.fetchall()
        await cur.close()
        return [str(r[0]) for r in rows]
