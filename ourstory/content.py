# -*- coding: utf-8 -*-
"""Static story content: timeline entries and the message pool.

The built-in content can be replaced by a ``content.json`` file next to the
config file::

    {"timeline": [{"title": "...", "text": "..."}], "messages": ["..."]}

Either key may be omitted; missing keys keep the built-in values.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineEntry:
    title: str
    text: str


@dataclass(frozen=True)
class StoryContent:
    timeline: Tuple[TimelineEntry, ...]
    messages: Tuple[str, ...]


TIMELINE: Tuple[TimelineEntry, ...] = (
    TimelineEntry(
        "2022 · Grenoble",
        "Two people, one city between the mountains, and a conversation that "
        "refused to end.",
    ),
    TimelineEntry(
        "The first badminton match",
        "You won. I said I let you win. We both know I didn't.",
    ),
    TimelineEntry(
        "The long-distance months",
        "Time zones, late calls, and learning that distance is just a number "
        "when the person is right.",
    ),
    TimelineEntry(
        "Madurai",
        "Temple bells, too much filter coffee, and the day I knew.",
    ),
    TimelineEntry(
        "Today",
        "Still choosing you. Every stressful day, every laugh, every rally.",
    ),
)

MESSAGES: Tuple[str, ...] = (
    "You make ordinary days feel like a celebration.",
    "You laugh at my worst jokes, and that is a kind of love.",
    "You are calm when I am not.",
    "You always save me the last bite.",
    "You make every place feel like home.",
    "You are my favourite teammate, on court and off.",
    "You believe in me louder than I do.",
    "You are my best decision.",
)

DEFAULT_CONTENT = StoryContent(timeline=TIMELINE, messages=MESSAGES)


def load_content(path: Optional[Path] = None) -> StoryContent:
    """Return built-in content, overridden by *path* when it exists and parses."""
    if path is None or not path.exists():
        return DEFAULT_CONTENT
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        timeline = DEFAULT_CONTENT.timeline
        messages = DEFAULT_CONTENT.messages
        if "timeline" in data:
            timeline = tuple(
                TimelineEntry(str(item["title"]), str(item["text"])) for item in data["timeline"]
            )
        if "messages" in data:
            messages = tuple(str(m) for m in data["messages"] if str(m).strip())
        if not messages:
            raise ValueError("message pool is empty")
    except (OSError, ValueError, TypeError, KeyError) as exc:
        logger.warning("Ignoring content override %s: %s", path, exc)
        return DEFAULT_CONTENT
    return StoryContent(timeline=timeline, messages=messages)
