# -*- coding: utf-8 -*-
"""Screen graph for the story: forward transitions, the back rule, session state.

Forward moves are looked up in ``FORWARD`` (screen × action → screen) with
optional guards in ``GUARDS``. Backward moves dispatch on the current screen
through ``BACK_RULES``; each rule is screen-local rather than a stack pop.

The only deferred work is the unlock timer scheduled after a successful gate
answer. It is cancelled whenever the session is re-locked.
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Protocol, Sequence, Tuple

from .gate import ADVANCE, REJECT, UNLOCK, Gate, GateResult
from .models import ProposalStatus, RevealDraw, Role, ScreenId

logger = logging.getLogger(__name__)

DEFAULT_UNLOCK_DELAY = 3.5


class NavigationError(ValueError):
    """Raised for a move the graph does not allow from the current screen."""


class Action(str, Enum):
    ENTER = "enter"
    BEGIN = "begin"
    OPEN_GALLERY = "open_gallery"
    OPEN_REVEAL = "open_reveal"
    OPEN_PROPOSAL = "open_proposal"
    OPEN_DATES = "open_dates"


@dataclass
class Session:
    """Process-lifetime state. Never persisted."""

    screen: ScreenId = ScreenId.GATE
    gate_step: int = 1
    unlocked: bool = False
    role: Optional[Role] = None
    proposal_status: ProposalStatus = ProposalStatus.PENDING
    reveal_draw: Optional[RevealDraw] = None

    @property
    def elevated(self) -> bool:
        return self.role is Role.ELEVATED


FORWARD: Dict[Tuple[ScreenId, Action], ScreenId] = {
    (ScreenId.GATE, Action.ENTER): ScreenId.WELCOME,
    (ScreenId.WELCOME, Action.BEGIN): ScreenId.TIMELINE,
    (ScreenId.TIMELINE, Action.OPEN_GALLERY): ScreenId.GALLERY,
    (ScreenId.TIMELINE, Action.OPEN_REVEAL): ScreenId.REVEAL,
    (ScreenId.GALLERY, Action.OPEN_REVEAL): ScreenId.REVEAL,
    (ScreenId.REVEAL, Action.OPEN_PROPOSAL): ScreenId.PROPOSAL,
    (ScreenId.PROPOSAL, Action.OPEN_DATES): ScreenId.DATES,
}

GUARDS: Dict[Tuple[ScreenId, Action], Callable[[Session], bool]] = {
    (ScreenId.GATE, Action.ENTER): lambda s: s.unlocked,
    (ScreenId.PROPOSAL, Action.OPEN_DATES): lambda s: s.proposal_status is not ProposalStatus.PENDING,
}


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def _loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


def _noop(_: bool) -> None:
    return None


class Navigator:
    """Owns the session and applies gate results, forward moves and back moves."""

    def __init__(
        self,
        gate: Gate,
        *,
        unlock_delay: float = DEFAULT_UNLOCK_DELAY,
        scheduler: Scheduler = _loop_scheduler,
        on_change: Optional[Callable[[Session], None]] = None,
        on_unlock: Callable[[bool], None] = _noop,
        on_accept: Callable[[bool], None] = _noop,
    ) -> None:
        self.gate = gate
        self.unlock_delay = unlock_delay
        self.session = Session()
        self._schedule = scheduler
        self._on_change = on_change
        self._on_unlock = on_unlock
        self._on_accept = on_accept
        self._pending_unlock: Optional[TimerHandle] = None

    # -----------------------------------------------------------------
    # Gate
    # -----------------------------------------------------------------

    @property
    def unlock_pending(self) -> bool:
        return self._pending_unlock is not None

    def submit_gate(self, raw_input: str) -> GateResult:
        """Apply one gate answer. Never raises for a wrong answer."""
        s = self.session
        if s.screen is not ScreenId.GATE:
            return GateResult(REJECT, reason="The gate is already open")
        if s.unlocked:
            return GateResult(UNLOCK, role=s.role)

        result = self.gate.submit(s.gate_step, raw_input)
        if result.kind == ADVANCE:
            s.gate_step = 2
            self._changed()
        elif result.kind == UNLOCK:
            s.unlocked = True
            s.role = result.role
            logger.info("Gate unlocked with role %s", result.role.value)
            self._pending_unlock = self._schedule(self.unlock_delay, self._enter)
            self._changed()
            self._on_unlock(result.role is Role.ELEVATED)
        return result

    def _enter(self) -> None:
        self._pending_unlock = None
        if self.session.screen is ScreenId.GATE and self.session.unlocked:
            self.go(Action.ENTER)

    def _cancel_pending_unlock(self) -> None:
        if self._pending_unlock is not None:
            self._pending_unlock.cancel()
            self._pending_unlock = None

    def relock(self) -> None:
        """Back to GATE step 2 with the role discarded."""
        self._cancel_pending_unlock()
        s = self.session
        s.unlocked = False
        s.role = None
        s.gate_step = 2
        s.screen = ScreenId.GATE

    # -----------------------------------------------------------------
    # Forward / back
    # -----------------------------------------------------------------

    def can_go(self, action: Action) -> bool:
        key = (self.session.screen, action)
        if key not in FORWARD:
            return False
        guard = GUARDS.get(key)
        return guard is None or guard(self.session)

    def go(self, action: Action) -> ScreenId:
        if not self.can_go(action):
            raise NavigationError(
                f"Cannot {action.value} from {self.session.screen.name.lower()}"
            )
        self.session.screen = FORWARD[(self.session.screen, action)]
        self._changed()
        return self.session.screen

    def back(self) -> ScreenId:
        """Apply the back rule for the current screen."""
        BACK_RULES[self.session.screen](self)
        self._changed()
        return self.session.screen

    @property
    def back_visible(self) -> bool:
        s = self.session
        if s.screen is ScreenId.GATE:
            return s.gate_step > 1 and not s.unlocked
        return s.screen > ScreenId.GATE

    # -----------------------------------------------------------------
    # Proposal / reveal
    # -----------------------------------------------------------------

    def accept_proposal(self, permanent: bool) -> ProposalStatus:
        s = self.session
        if s.screen is not ScreenId.PROPOSAL:
            raise NavigationError("The question has not been asked yet")
        if s.proposal_status is ProposalStatus.PENDING:
            s.proposal_status = (
                ProposalStatus.ACCEPTED_PERMANENTLY if permanent else ProposalStatus.ACCEPTED
            )
            self._changed()
            self._on_accept(permanent)
        return s.proposal_status

    def draw_reveal(
        self,
        messages: Sequence[str],
        image_count: int,
        rng: Optional[random.Random] = None,
    ) -> RevealDraw:
        if not messages:
            raise ValueError("No messages to reveal")
        pick = rng if rng is not None else random
        message = messages[pick.randrange(len(messages))]
        index = pick.randrange(image_count) if image_count > 0 else None
        self.session.reveal_draw = RevealDraw(message=message, image_index=index)
        self._changed()
        return self.session.reveal_draw

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.session)


# ---------------------------------------------------------------------
# Back rules
# ---------------------------------------------------------------------

def _back_from_gate(nav: Navigator) -> None:
    s = nav.session
    if s.unlocked:
        # Unlock still pending: drop it and stay on the place question.
        nav.relock()
    elif s.gate_step == 2:
        s.gate_step = 1


def _back_from_proposal(nav: Navigator) -> None:
    s = nav.session
    if s.proposal_status is not ProposalStatus.PENDING:
        s.proposal_status = ProposalStatus.PENDING
    else:
        s.screen = ScreenId.REVEAL


def _revert_to(target: ScreenId) -> Callable[[Navigator], None]:
    def rule(nav: Navigator) -> None:
        nav.session.screen = target
    return rule


BACK_RULES: Dict[ScreenId, Callable[[Navigator], None]] = {
    ScreenId.GATE: _back_from_gate,
    ScreenId.WELCOME: Navigator.relock,
    ScreenId.TIMELINE: _revert_to(ScreenId.WELCOME),
    ScreenId.GALLERY: _revert_to(ScreenId.TIMELINE),
    ScreenId.REVEAL: _revert_to(ScreenId.GALLERY),
    ScreenId.PROPOSAL: _back_from_proposal,
    ScreenId.DATES: _revert_to(ScreenId.PROPOSAL),
}
