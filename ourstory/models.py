# -*- coding: utf-8 -*-
"""Plain data types shared by the gate, navigation, store and UI layers.

Nothing in here performs I/O.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional


LOCATION_PLACEHOLDER = "Location TBD"


class Role(str, Enum):
    """Permission level decided at unlock time."""

    STANDARD = "standard"
    ELEVATED = "elevated"


class ScreenId(IntEnum):
    """Screens in declared order. GATE is the initial screen."""

    GATE = 1
    WELCOME = 2
    TIMELINE = 3
    GALLERY = 4
    REVEAL = 5
    PROPOSAL = 6
    DATES = 7


class ProposalStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    ACCEPTED_PERMANENTLY = "accepted-permanently"


@dataclass(frozen=True)
class DateSuggestion:
    """A place we want to go. Newest suggestions are kept first."""

    id: str
    name: str
    location: str
    date_added: str
    visited: bool = False

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "DateSuggestion":
        """Build from a stored record; raises on missing/invalid fields."""
        if not isinstance(raw, dict):
            raise TypeError("Date suggestion record must be an object")
        name = str(raw["name"])
        if not name.strip():
            raise ValueError("Date suggestion name is empty")
        # Records exported from the browser version use camelCase.
        date_added = raw.get("date_added", raw.get("dateAdded"))
        if date_added is None:
            raise KeyError("date_added")
        return cls(
            id=str(raw["id"]),
            name=name,
            location=str(raw.get("location") or LOCATION_PLACEHOLDER),
            date_added=str(date_added),
            visited=bool(raw.get("visited", False)),
        )


@dataclass(frozen=True)
class RevealDraw:
    """Message plus optional gallery index picked on the reveal screen."""

    message: str
    image_index: Optional[int] = None
