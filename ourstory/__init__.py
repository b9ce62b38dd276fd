# -*- coding: utf-8 -*-
"""Our Story package.

Modules:
    app_logging: Logging setup (routes records to the Textual console).
    codec:       Image compression for the gallery.
    content:     Static timeline entries and message pool.
    crypto:      Gate answer hashing and verification.
    db:          SQLite schema + async data access.
    gate:        Two-step knowledge check.
    logic:       Config and collection mutators that compose db + codec.
    models:      Roles, screens and persisted record types.
    navigation:  Screen graph, back rule and session state.
    store:       Generic collection slots on top of db.
    ui:          Textual-based UI (screens and app).
    theme.css:   Textual CSS theme (loaded by ui.py).
"""

__all__ = [
    "app_logging",
    "codec",
    "content",
    "crypto",
    "db",
    "gate",
    "logic",
    "models",
    "navigation",
    "store",
    "ui",
]
