"""
BGP Session State

Runtime record of one peering session: where it is in the establishment
walk, when it got there, and the traffic counters seen so far.
"""

import copy
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import *


@dataclass
class SessionState:
    """Runtime state of a BGP session"""
    address: str
    state: BGPState = STATE_IDLE
    state_changed_at: float = 0.0

    prefixes_received: int = 0
    prefixes_sent: int = 0
    messages_received: int = 0
    messages_sent: int = 0
    last_error: str = ""

    # Seconds spent in Established, filled in on read
    uptime: int = 0

    # (state, entered_at) for every state entered, oldest first
    history: List[Tuple[BGPState, float]] = field(default_factory=list)

    @classmethod
    def initial(cls, address: str, now: Optional[float] = None) -> "SessionState":
        """Create a session in Idle, entered at ``now``"""
        if now is None:
            now = time.time()
        return cls(address=address, state=STATE_IDLE, state_changed_at=now,
                   history=[(STATE_IDLE, now)])

    @property
    def state_name(self) -> str:
        return FSM_STATE_NAMES.get(self.state, f"Unknown({self.state})")

    def is_established(self) -> bool:
        return self.state == STATE_ESTABLISHED

    def next_state(self) -> Optional[BGPState]:
        """State that follows the current one, None once Established"""
        index = STATE_SEQUENCE.index(self.state)
        if index + 1 >= len(STATE_SEQUENCE):
            return None
        return STATE_SEQUENCE[index + 1]

    def entered_at(self, state: BGPState) -> Optional[float]:
        for entry_state, entered in self.history:
            if entry_state == state:
                return entered
        return None

    def advance(self, now: Optional[float] = None) -> BGPState:
        """
        Move to the next state in the fixed sequence

        The entry timestamp is forced strictly after the previous one so the
        history stays ordered even when the clock has not moved.

        Args:
            now: Entry time (default: time.time())

        Returns:
            The new state

        Raises:
            ValueError: If the session is already Established
        """
        new_state = self.next_state()
        if new_state is None:
            raise ValueError(f"session {self.address} is already {self.state_name}")

        if now is None:
            now = time.time()
        if now <= self.state_changed_at:
            now = self.state_changed_at + TIMESTAMP_EPSILON

        self.state = new_state
        self.state_changed_at = now
        self.history.append((new_state, now))

        if new_state == STATE_ESTABLISHED:
            self.prefixes_received = ESTABLISHED_PREFIXES_RECEIVED
            self.prefixes_sent = ESTABLISHED_PREFIXES_SENT
            self.messages_received += ESTABLISHED_MESSAGES_RECEIVED
            self.messages_sent += ESTABLISHED_MESSAGES_SENT

        return new_state

    def snapshot(self, now: Optional[float] = None) -> "SessionState":
        """Deep copy with uptime computed as of ``now``"""
        result = copy.deepcopy(self)
        if result.state == STATE_ESTABLISHED:
            if now is None:
                now = time.time()
            result.uptime = max(0, int(now - result.state_changed_at))
        else:
            result.uptime = 0
        return result

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'state': self.state_name,
            'state_changed_at': self.state_changed_at,
            'uptime': self.uptime,
            'prefixes_received': self.prefixes_received,
            'prefixes_sent': self.prefixes_sent,
            'messages_received': self.messages_received,
            'messages_sent': self.messages_sent,
            'last_error': self.last_error,
        }
