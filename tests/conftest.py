"""Shared test fixtures."""

import asyncio
import io
from dataclasses import dataclass, field
from typing import Callable

import pytest
from PIL import Image

from ourstory import db
from ourstory.gate import Gate, GateSecrets


@dataclass
class FakeTimer:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Records scheduled callbacks; tests fire them explicitly."""

    timers: list[FakeTimer] = field(default_factory=list)

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire_all(self) -> None:
        for timer in list(self.timers):
            if not timer.cancelled:
                timer.callback()


def make_image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    color = (255, 182, 193, 255) if mode == "RGBA" else (255, 182, 193)
    buf = io.BytesIO()
    Image.new(mode, (width, height), color[: len(mode)]).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture(scope="session")
def gate_secrets() -> GateSecrets:
    return GateSecrets.from_answers("2022", "grenoble", "madurai")


@pytest.fixture
def gate(gate_secrets: GateSecrets) -> Gate:
    return Gate(gate_secrets)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def tmp_db(tmp_path, monkeypatch) -> str:
    path = str(tmp_path / "story.sqlite3")
    monkeypatch.setattr(db, "DB_PATH", path)
    asyncio.run(db.init_db())
    return path


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home / "ourstory"
