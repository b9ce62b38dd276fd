# -*- coding: utf-8 -*-
"""Textual UI for Our Story.

This file contains ONLY the UI: one Screen per story screen, and the App
wrapper. Which screen is visible is decided by ``navigation.Navigator``;
the App listens for its change callback and switches screens accordingly.
Each screen exposes ``sync()`` to redraw itself from the session when the
state changes without a screen change (gate step, proposal answer, reveal).
"""
from __future__ import annotations

import shlex
from pathlib import Path
from typing import Callable, Dict, Optional, Type

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
)

from ourstory.app_logging import configure_logging
from ourstory.codec import ImageDecodeError, decode_data_url
from ourstory.content import DEFAULT_CONTENT, StoryContent
from ourstory.logic import (
    Collections,
    add_date,
    build_gate,
    delete_date,
    delete_image,
    init_db,
    load_collections,
    load_config,
    load_story_content,
    toggle_visited,
    upload_images,
)
from ourstory.models import ProposalStatus, ScreenId
from ourstory.navigation import Action, Navigator, Session

THEME_CSS_PATH = str(Path(__file__).with_name("theme.css"))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _TimerHandle:
    """Adapts a Textual Timer to the navigator's ``cancel()`` handle."""

    def __init__(self, timer: Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


def _image_caption(index: int, payload: str) -> str:
    kb = len(payload) * 3 // 4 // 1024
    try:
        with decode_data_url(payload) as img:
            w, h = img.size
    except (ImageDecodeError, OSError, ValueError):
        return f"Memory #{index + 1}  (unreadable)"
    return f"Memory #{index + 1}  {w}×{h}  ~{kb} KB"


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

class StoryScreen(Screen):
    """Base for every story screen: back button, ESC binding, error surfacing."""

    BINDINGS = [Binding("escape", "app.go_back", "Back")]

    @property
    def navigator(self) -> Navigator:
        return self.app.navigator

    @property
    def session(self) -> Session:
        return self.app.navigator.session

    @property
    def collections(self) -> Collections:
        return self.app.collections

    def compose_back(self) -> ComposeResult:
        yield Button("‹ Back", id="back", classes="back")

    def on_mount(self) -> None:
        self.sync()

    def sync(self) -> None:
        for button in self.query("#back"):
            button.display = self.navigator.back_visible

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "back":
            self.app.action_go_back()
            return
        try:
            await self.handle(bid)
        except Exception as exc:
            self.app.notify(str(exc))

    async def handle(self, bid: str) -> None:
        """Screen-specific button handling."""


class GateScreen(StoryScreen):
    """Two questions. After the second, the unlock message shows until the timer fires."""

    def __init__(self) -> None:
        super().__init__()
        self.place_answer = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with Container(id="card"):
            yield Static("Only one person can enter this story…", classes="title")
            yield Static("This space belongs to us 💞", classes="hint")
            yield Label("", id="question")
            yield Input(id="answer")
            yield Static("", id="error", classes="error")
            yield Button("Continue", id="continue", classes="-primary")
            yield Static("", id="granted", classes="granted", markup=False)
        yield Footer()

    def sync(self) -> None:
        super().sync()
        s = self.session
        answer = self.query_one("#answer", Input)
        granted = self.query_one("#granted", Static)
        for wid in ("#question", "#answer", "#error", "#continue"):
            self.query_one(wid).display = not s.unlocked
        granted.display = s.unlocked
        if s.unlocked:
            who = "Admin" if s.elevated else "Access"
            granted.update(
                f"{who} granted to Murugesa\nLifetime membership approved.\n\n"
                f"Since 2022.\nSince {self.place_answer}.\nSince you."
            )
            return
        if s.gate_step == 1:
            self.query_one("#question", Label).update("Since what year have we been writing our story?")
            answer.placeholder = "YYYY"
        else:
            self.query_one("#question", Label).update("Where did our story begin?")
            answer.placeholder = "Enter city..."
        answer.focus()

    def _submit(self) -> None:
        answer = self.query_one("#answer", Input)
        error = self.query_one("#error", Static)
        value = answer.value
        step = self.session.gate_step
        result = self.navigator.submit_gate(value)
        if not result.accepted:
            error.update(result.reason)
            return
        error.update("")
        if step == 2:
            self.place_answer = value.strip()
        answer.value = ""
        self.sync()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    async def handle(self, bid: str) -> None:
        if bid == "continue":
            self._submit()


class WelcomeScreen(StoryScreen):
    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with Container(id="card"):
            yield Static("Hi Murugesa 🌷", classes="title")
            yield Static(
                "Since 2022… my life has been different.\n"
                "Better. Softer. Happier.\n\n"
                "I didn't just build this app.\n"
                "I built this for you.",
                classes="body",
            )
            yield Button("Begin Our Story ›", id="begin", classes="-primary")
        yield Footer()

    async def handle(self, bid: str) -> None:
        if bid == "begin":
            self.navigator.go(Action.BEGIN)


class TimelineScreen(StoryScreen):
    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with VerticalScroll(id="card"):
            yield Static("Our Journey", classes="title")
            for entry in self.app.content.timeline:
                yield Static(entry.title, classes="entry-title", markup=False)
                yield Static(entry.text, classes="entry-text", markup=False)
            with Horizontal(classes="actions"):
                yield Button("Our Gallery", id="gallery")
                yield Button("Why I Love You ♥", id="reveal", classes="-primary")
        yield Footer()

    async def handle(self, bid: str) -> None:
        if bid == "gallery":
            self.navigator.go(Action.OPEN_GALLERY)
        elif bid == "reveal":
            self.navigator.go(Action.OPEN_REVEAL)


class GalleryScreen(StoryScreen):
    """Uploaded images. Anyone can add; only the elevated role can delete."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with Container(id="card"):
            yield Static("Captured Moments", classes="title")
            self.list_view = ListView(id="images")
            yield self.list_view
            yield Static("No memories uploaded yet...", id="empty", classes="hint")
            self.paths_in = Input(placeholder="image paths (quote paths with spaces)", id="paths")
            yield self.paths_in
            with Horizontal(classes="actions"):
                yield Button("Upload", id="upload")
                yield Button("Delete", id="delete")
                yield Button("Keep Going ›", id="next", classes="-primary")
        yield Footer()

    def sync(self) -> None:
        super().sync()
        self.query_one("#delete", Button).display = self.session.elevated
        self.refresh_list()

    def refresh_list(self) -> None:
        self.list_view.clear()
        images = self.collections.images
        for idx, payload in enumerate(images):
            self.list_view.append(ListItem(Label(_image_caption(idx, payload), markup=False)))
        self.query_one("#empty", Static).display = not images

    async def handle(self, bid: str) -> None:
        if bid == "upload":
            paths = shlex.split(self.paths_in.value)
            if not paths:
                self.app.notify("Enter one or more image paths")
                return
            added = await upload_images(self.collections, paths)
            self.paths_in.value = ""
            self.refresh_list()
            self.app.notify(f"Added {added} of {len(paths)} image(s).")
        elif bid == "delete":
            index = self.list_view.index
            if index is None:
                self.app.notify("Select an image first")
                return
            if await delete_image(self.collections, self.session.role, index):
                self.refresh_list()
                self.app.notify("Image deleted.")
        elif bid == "next":
            self.navigator.go(Action.OPEN_REVEAL)


class RevealScreen(StoryScreen):
    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with Container(id="card"):
            yield Static("Why I Love You", classes="title")
            yield Button("♥", id="heart", classes="heart")
            yield Static("Tap the heart to reveal", classes="hint")
            yield Static("", id="message", classes="message", markup=False)
            yield Static("", id="memory", classes="hint", markup=False)
            yield Button("One More Thing… ›", id="next")
        yield Footer()

    def sync(self) -> None:
        super().sync()
        draw = self.session.reveal_draw
        message = self.query_one("#message", Static)
        memory = self.query_one("#memory", Static)
        if draw is None:
            message.update("")
            memory.update("")
            return
        message.update(f"“{draw.message}”")
        images = self.collections.images
        if draw.image_index is not None and draw.image_index < len(images):
            memory.update(_image_caption(draw.image_index, images[draw.image_index]))
        else:
            memory.update("")

    async def handle(self, bid: str) -> None:
        if bid == "heart":
            self.navigator.draw_reveal(self.app.content.messages, len(self.collections.images))
        elif bid == "next":
            self.navigator.go(Action.OPEN_PROPOSAL)


class ProposalScreen(StoryScreen):
    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with Container(id="card"):
            with Container(id="pending"):
                yield Static("Murugesa…", classes="title")
                yield Static(
                    "From 2022 in Grenoble\nto every badminton match,\n"
                    "to every stressful day,\nto every laugh we share…\n\n"
                    "You are my best decision.",
                    classes="body",
                )
                yield Static(
                    "Will you be my Valentine?\nAnd my forever teammate in life? 🏸💍",
                    classes="title",
                )
                with Horizontal(classes="actions"):
                    yield Button("YES 💖", id="yes")
                    yield Button("ALWAYS ♾️", id="always", classes="-primary")
            with Container(id="accepted"):
                yield Static("Best decision of my life.", classes="title")
                yield Static("OURS FOREVER", classes="hint")
                yield Button("More dates to come ›", id="dates")
        yield Footer()

    def sync(self) -> None:
        super().sync()
        pending = self.session.proposal_status is ProposalStatus.PENDING
        self.query_one("#pending").display = pending
        self.query_one("#accepted").display = not pending

    async def handle(self, bid: str) -> None:
        if bid in ("yes", "always"):
            self.navigator.accept_proposal(permanent=bid == "always")
        elif bid == "dates":
            self.navigator.go(Action.OPEN_DATES)


class DatesScreen(StoryScreen):
    """Date wishlist. Select an entry to toggle visited; elevated role can delete."""

    def compose(self) -> ComposeResult:
        yield Header()
        yield from self.compose_back()
        with Container(id="card"):
            yield Static("More dates to come", classes="title")
            yield Static("Planning our future, one place at a time.", classes="hint")
            self.name_in = Input(placeholder="Place name (e.g. Secret Rooftop)", id="place")
            self.location_in = Input(placeholder="Location or URL", id="location")
            yield self.name_in
            yield self.location_in
            with Horizontal(classes="actions"):
                yield Button("Add", id="add", classes="-primary")
                yield Button("Delete", id="delete")
            self.list_view = ListView(id="dates")
            yield self.list_view
            yield Static("Our adventure list is empty...", id="empty", classes="hint")
        yield Footer()

    def sync(self) -> None:
        super().sync()
        self.query_one("#delete", Button).display = self.session.elevated
        self.refresh_list()

    def refresh_list(self) -> None:
        self.list_view.clear()
        for d in self.collections.dates:
            mark = "[x]" if d.visited else "[ ]"
            item = ListItem(Label(f"{mark} {d.name} — {d.location} · {d.date_added}", markup=False))
            item.data = d.id
            self.list_view.append(item)
        self.query_one("#empty", Static).display = not self.collections.dates

    async def on_list_view_selected(self, message: ListView.Selected) -> None:
        try:
            changed = await toggle_visited(self.collections, message.item.data)
        except Exception as exc:
            self.app.notify(str(exc))
            return
        if changed:
            self.refresh_list()

    async def handle(self, bid: str) -> None:
        if bid == "add":
            created = await add_date(self.collections, self.name_in.value, self.location_in.value)
            if created is None:
                self.app.notify("Place name required")
                return
            self.name_in.value = ""
            self.location_in.value = ""
            self.refresh_list()
        elif bid == "delete":
            item = self.list_view.highlighted_child
            if item is None:
                self.app.notify("Select a date first")
                return
            if await delete_date(self.collections, self.session.role, item.data):
                self.refresh_list()


SCREENS: Dict[ScreenId, Type[StoryScreen]] = {
    ScreenId.GATE: GateScreen,
    ScreenId.WELCOME: WelcomeScreen,
    ScreenId.TIMELINE: TimelineScreen,
    ScreenId.GALLERY: GalleryScreen,
    ScreenId.REVEAL: RevealScreen,
    ScreenId.PROPOSAL: ProposalScreen,
    ScreenId.DATES: DatesScreen,
}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

class OurStoryApp(App):
    """Textual App wrapper. Loads config, DB and content, then shows the gate."""

    TITLE = "OUR STORY"
    CSS_PATH = THEME_CSS_PATH
    navigator: Optional[Navigator] = None
    collections: Optional[Collections] = None
    content: StoryContent = DEFAULT_CONTENT

    async def on_mount(self) -> None:
        configure_logging()
        await init_db()
        cfg = load_config()
        self.content = load_story_content()
        self.collections = await load_collections(cfg)
        self.navigator = Navigator(
            build_gate(cfg),
            unlock_delay=float(cfg.get("unlock_delay_seconds", 3.5)),
            scheduler=self._schedule,
            on_change=self._on_navigation,
            on_unlock=self._celebrate_unlock,
            on_accept=self._celebrate_accept,
        )
        self._shown = ScreenId.GATE
        await self.push_screen(GateScreen())

    def _schedule(self, delay: float, callback: Callable[[], None]) -> _TimerHandle:
        return _TimerHandle(self.set_timer(delay, callback))

    def _on_navigation(self, session: Session) -> None:
        if session.screen is self._shown:
            sync = getattr(self.screen, "sync", None)
            if sync is not None:
                sync()
            return
        self._shown = session.screen
        self.switch_screen(SCREENS[session.screen]())

    def action_go_back(self) -> None:
        nav = self.navigator
        if nav is None:
            return
        if nav.back_visible or nav.unlock_pending:
            nav.back()
        elif nav.session.screen is ScreenId.GATE and not nav.session.unlocked:
            # ESC on the first question quits, like on a login screen.
            self.exit()

    # Decorative effects: fire-and-forget, nothing depends on them.

    def _celebrate_unlock(self, elevated: bool) -> None:
        self.notify("🔓 Unlocked", title="Admin" if elevated else "Welcome", timeout=3.5)

    def _celebrate_accept(self, permanent: bool) -> None:
        hearts = "💖 " * (10 if permanent else 5)
        self.notify(hearts.strip(), title="ALWAYS ♾️" if permanent else "YES!", timeout=5 if permanent else 3)


if __name__ == "__main__":
    import asyncio
    asyncio.run(OurStoryApp().run_async())
