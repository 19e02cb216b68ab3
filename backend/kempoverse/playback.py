"""
Countdown playback of a training session.

The whole player is one immutable PlaybackState plus a pure transition()
function, so combinations like "abandoned but still ticking" cannot exist.
PlaybackController wires that state machine to the API: it loads the
session, feeds it events and reports the final status.

    LOADING -> READY -> RUNNING <-> PAUSED -> COMPLETED | ABANDONED

Leaving before the end reports nothing; the session stays "active" server-side.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Union

import httpx

from kempoverse.client import ApiError, KempoverseClient

log = logging.getLogger(__name__)

COMPLETED = "completed"
ABANDONED = "abandoned"


class Phase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


TERMINAL = frozenset({Phase.COMPLETED, Phase.ABANDONED})


class InvalidTransition(Exception):
    pass


@dataclass(frozen=True, slots=True)
class PlaybackState:
    phase: Phase = Phase.LOADING
    index: int = 0
    seconds_remaining: int = 0
    item_seconds: tuple[int, ...] = ()

    @property
    def total(self) -> int:
        return len(self.item_seconds)

    @property
    def is_last(self) -> bool:
        return self.index >= self.total - 1

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL


# Events
@dataclass(frozen=True, slots=True)
class Loaded:
    item_seconds: tuple[int, ...]

@dataclass(frozen=True, slots=True)
class Start:
    pass

@dataclass(frozen=True, slots=True)
class Tick:
    pass

@dataclass(frozen=True, slots=True)
class Pause:
    pass

@dataclass(frozen=True, slots=True)
class Resume:
    pass

@dataclass(frozen=True, slots=True)
class Next:
    pass

@dataclass(frozen=True, slots=True)
class Previous:
    pass

@dataclass(frozen=True, slots=True)
class EndEarly:
    pass


Event = Union[Loaded, Start, Tick, Pause, Resume, Next, Previous, EndEarly]
Transition = tuple[PlaybackState, Optional[str]]


def _advance(state: PlaybackState) -> Transition:
    if state.is_last:
        return replace(state, phase=Phase.COMPLETED, seconds_remaining=0), COMPLETED
    nxt = state.index + 1
    return replace(state, index=nxt, seconds_remaining=state.item_seconds[nxt]), None


def transition(state: PlaybackState, event: Event) -> Transition:
    """
    Apply one event. Returns the new state and the status to report to the
    server ("completed" / "abandoned"), or None when nothing needs reporting.
    Raises InvalidTransition for events that make no sense in the current phase.
    """
    phase = state.phase
    if phase in TERMINAL:
        raise InvalidTransition(f"session already {phase.value}")

    if isinstance(event, Loaded):
        if phase is not Phase.LOADING:
            raise InvalidTransition("session already loaded")
        if not event.item_seconds:
            raise InvalidTransition("session has no items")
        seconds = tuple(event.item_seconds)
        return PlaybackState(Phase.READY, 0, seconds[0], seconds), None

    if phase is Phase.LOADING:
        raise InvalidTransition(f"{type(event).__name__} before the session is loaded")

    if isinstance(event, Tick):
        if phase is not Phase.RUNNING:
            return state, None
        remaining = state.seconds_remaining - 1
        if remaining <= 0:
            return _advance(state)
        return replace(state, seconds_remaining=remaining), None

    if isinstance(event, Start):
        if phase is not Phase.READY:
            raise InvalidTransition("session already started")
        return replace(state, phase=Phase.RUNNING), None

    if isinstance(event, Pause):
        if phase is not Phase.RUNNING:
            raise InvalidTransition(f"cannot pause while {phase.value}")
        return replace(state, phase=Phase.PAUSED), None

    if isinstance(event, Resume):
        if phase is not Phase.PAUSED:
            raise InvalidTransition(f"cannot resume while {phase.value}")
        return replace(state, phase=Phase.RUNNING), None

    if isinstance(event, Next):
        return _advance(state)

    if isinstance(event, Previous):
        if state.index == 0:
            return state, None
        prev = state.index - 1
        return replace(state, index=prev, seconds_remaining=state.item_seconds[prev]), None

    if isinstance(event, EndEarly):
        return replace(state, phase=Phase.ABANDONED), ABANDONED

    raise InvalidTransition(f"unknown event {event!r}")


def format_time(seconds: int) -> str:
    """MM:SS"""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


class PlaybackController:
    """
    Drives one session. Status reports that fail are kept in pending_report
    (sync_error is True) until retry_report() gets them through.
    """

    def __init__(
        self,
        client: KempoverseClient,
        session_id: str,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.client = client
        self.session_id = session_id
        self.clock = clock
        self.state = PlaybackState()
        self.items: list[dict] = []
        self.pending_report: Optional[tuple[str, datetime]] = None

    def load(self) -> PlaybackState:
        session = self.client.get_session(self.session_id)
        self.items = sorted(session.get("items") or [], key=lambda i: i["sequence_order"])
        return self.dispatch(Loaded(tuple(i["time_allocated_seconds"] for i in self.items)))

    def dispatch(self, event: Event) -> PlaybackState:
        self.state, report = transition(self.state, event)
        if report:
            self.pending_report = (report, self.clock())
            self.retry_report()
        return self.state

    # user controls
    def start(self) -> PlaybackState:
        return self.dispatch(Start())

    def tick(self) -> PlaybackState:
        return self.dispatch(Tick())

    def toggle_pause(self) -> PlaybackState:
        return self.dispatch(Resume() if self.state.phase is Phase.PAUSED else Pause())

    def next(self) -> PlaybackState:
        return self.dispatch(Next())

    def previous(self) -> PlaybackState:
        return self.dispatch(Previous())

    def end_early(self) -> PlaybackState:
        return self.dispatch(EndEarly())

    # reporting
    @property
    def sync_error(self) -> bool:
        return self.pending_report is not None

    def retry_report(self) -> bool:
        if self.pending_report is None:
            return True
        status, at = self.pending_report
        try:
            self.client.update_session_status(self.session_id, status, completed_at=at)
        except (httpx.HTTPError, ApiError) as e:
            log.warning("could not report session %s as %s: %s", self.session_id, status, e)
            return False
        self.pending_report = None
        return True

    # display helpers
    @property
    def current_item(self) -> Optional[dict]:
        if not self.items or self.state.phase is Phase.LOADING:
            return None
        return self.items[self.state.index]

    def progress(self) -> tuple[int, int]:
        return self.state.index + 1, self.state.total

    def remaining_display(self) -> str:
        return format_time(self.state.seconds_remaining)

    def run(self, *, sleep: Callable[[float], None] = time.sleep, interval: float = 1.0) -> PlaybackState:
        """Play to the end, one Tick per interval. A paused session is resumed first."""
        if self.state.phase is Phase.LOADING:
            self.load()
        if self.state.phase is Phase.READY:
            self.start()
        elif self.state.phase is Phase.PAUSED:
            self.dispatch(Resume())
        while not self.state.is_terminal:
            sleep(interval)
            self.tick()
        return self.state
