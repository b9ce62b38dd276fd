#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Application entrypoint for Our Story.

This file is intentionally minimal. It only boots the Textual UI app.
"""
from __future__ import annotations

import asyncio
from ourstory.ui import OurStoryApp


def main() -> None:
    """Run the Textual application."""
    asyncio.run(OurStoryApp().run_async())


if __name__ == "__main__":
    main()
