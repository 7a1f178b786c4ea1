"""
Session Monitor

Polls a session engine and turns successive GetAllSessions snapshots
into change events (peer added, peer removed, state changed). This is
the producer side of a real-time broadcaster; delivering the events to
subscribers is left to the callback.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .constants import FSM_STATE_NAMES
from .interface import SessionEngine
from .session import SessionState

EVENT_SESSION_ADDED = "session_added"
EVENT_SESSION_REMOVED = "session_removed"
EVENT_STATE_CHANGED = "state_changed"


@dataclass
class SessionEvent:
    """One observed change between two snapshots"""
    kind: str
    address: str
    old_state: Optional[int] = None
    new_state: Optional[int] = None
    session: Optional[SessionState] = None

    def describe(self) -> str:
        if self.kind == EVENT_SESSION_ADDED:
            return f"{self.address} added in {FSM_STATE_NAMES[self.new_state]}"
        if self.kind == EVENT_SESSION_REMOVED:
            return f"{self.address} removed (was {FSM_STATE_NAMES[self.old_state]})"
        return (f"{self.address} {FSM_STATE_NAMES[self.old_state]} -> "
                f"{FSM_STATE_NAMES[self.new_state]}")


def diff_sessions(previous: Dict[str, SessionState],
                  current: List[SessionState]) -> List[SessionEvent]:
    """
    Compare two snapshots

    Args:
        previous: Last snapshot keyed by address
        current: New snapshot, in engine order

    Returns:
        Events in the order of the new snapshot, removals last
    """
    events = []
    seen = set()

    for session in current:
        seen.add(session.address)
        before = previous.get(session.address)
        if before is None:
            events.append(SessionEvent(EVENT_SESSION_ADDED, session.address,
                                       new_state=session.state, session=session))
        elif before.state != session.state:
            events.append(SessionEvent(EVENT_STATE_CHANGED, session.address,
                                       old_state=before.state, new_state=session.state,
                                       session=session))

    for address, before in previous.items():
        if address not in seen:
            events.append(SessionEvent(EVENT_SESSION_REMOVED, address,
                                       old_state=before.state))

    return events


class SessionMonitor:
    """
    Periodic snapshot poller
    """

    def __init__(self, engine: SessionEngine, interval: float = 1.0,
                 on_event: Optional[Callable[[SessionEvent], None]] = None):
        """
        Initialize session monitor

        Args:
            engine: Session engine to poll
            interval: Seconds between polls
            on_event: Called once per event, sync or async
        """
        self.engine = engine
        self.interval = interval
        self.on_event = on_event

        self.sessions: Dict[str, SessionState] = {}
        self.running = False
        self.task: Optional[asyncio.Task] = None

        self.logger = logging.getLogger("SessionMonitor")

    async def poll_once(self) -> List[SessionEvent]:
        """Take one snapshot, emit and return the changes since the last one"""
        current = await self.engine.get_all_sessions()
        events = diff_sessions(self.sessions, current)
        self.sessions = {session.address: session for session in current}

        for event in events:
            self.logger.debug(f"Session event: {event.describe()}")
            if self.on_event:
                result = self.on_event(event)
                if asyncio.iscoroutine(result):
                    await result

        return events

    async def run(self) -> None:
        """Poll until stopped"""
        self.running = True
        while self.running:
            try:
                await self.poll_once()
            except Exception as e:
                self.logger.error(f"Monitor loop error: {e}")
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        self.task = asyncio.create_task(self.run())
        return self.task

    async def stop(self) -> None:
        self.running = False
        if self.task and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
