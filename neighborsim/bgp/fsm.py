"""
BGP Session Establishment FSM (RFC 4271 Section 8)

Walks one peer through the 6-state establishment sequence on a timer.

States:
- Idle (0): Initial state, entered when the peer is added
- Connect (1): Waiting for TCP connection
- Active (2): Retrying TCP connection
- OpenSent (3): TCP established, OPEN sent
- OpenConfirm (4): OPEN received, waiting for KEEPALIVE
- Established (5): Peering is up

Transitions are forward only and never skip a state. Each step sleeps
the configured delay, then re-checks that the peer registration it was
started for is still live before writing the next state. A peer that is
removed (or removed and re-added under the same address) mid-walk stops
the old walk without any write.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from .constants import *
from .store import PeerStore

SleepFunc = Callable[[float], Awaitable[None]]


class EstablishmentFSM:
    """
    Background state progression for one peer

    One instance per peer registration. The coordinator creates it on
    add and cancels it on remove.
    """

    def __init__(self, address: str, generation: int, store: PeerStore,
                 lock: asyncio.Lock, delay: float = DEFAULT_STATE_DELAY,
                 sleep: Optional[SleepFunc] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize establishment FSM

        Args:
            address: Peer address
            generation: Registration token this walk belongs to
            store: Shared peer store
            lock: Coordinator lock guarding the store
            delay: Inter-state delay in seconds
            sleep: Delay primitive (default: asyncio.sleep)
            clock: Time source for entry timestamps (default: time.time)
        """
        self.address = address
        self.generation = generation
        self.store = store
        self.lock = lock
        self.delay = delay
        self.sleep = sleep or asyncio.sleep
        self.clock = clock or time.time

        # Last state this walk wrote
        self.state = STATE_IDLE

        self.task: Optional[asyncio.Task] = None

        # Logger
        self.logger = logging.getLogger(f"EstablishmentFSM[{address}]")

        # Callbacks (set by coordinator)
        self.on_state_change: Optional[Callable[[str, int, int], None]] = None  # (address, old, new)
        self.on_established: Optional[Callable[[str], None]] = None

    def get_state_name(self) -> str:
        """Get last written state name"""
        return FSM_STATE_NAMES.get(self.state, f"Unknown({self.state})")

    def start(self) -> asyncio.Task:
        """Schedule the walk on the running loop"""
        self.task = asyncio.create_task(self.run(), name=f"fsm-{self.address}-{self.generation}")
        return self.task

    def stop(self) -> None:
        """Request cancellation of the walk"""
        if self.task and not self.task.done():
            self.task.cancel()

    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()

    async def run(self) -> None:
        """
        Walk Idle -> Established

        Exits silently if the registration disappears, or on cancellation.
        """
        try:
            while True:
                async with self.lock:
                    if not self.store.is_current(self.address, self.generation):
                        self.logger.debug(f"Peer gone before next step (generation {self.generation}), exiting")
                        return
                    if self.store.sessions[self.address].is_established():
                        return

                await self.sleep(self.delay)

                async with self.lock:
                    # Re-check right before the write, never after
                    if not self.store.is_current(self.address, self.generation):
                        self.logger.debug(f"Peer removed mid-walk (generation {self.generation}), "
                                          f"dropping {self.get_state_name()} -> next write")
                        return

                    session = self.store.sessions[self.address]
                    old_state = session.state
                    new_state = session.advance(self.clock())
                    self.state = new_state

                self.logger.info(f"State transition: {FSM_STATE_NAMES[old_state]} -> {FSM_STATE_NAMES[new_state]}")
                await self._notify(old_state, new_state)

                if new_state == STATE_ESTABLISHED:
                    return

        except asyncio.CancelledError:
            # Walk was cancelled (peer removed or engine closing)
            self.logger.debug(f"Walk cancelled in {self.get_state_name()}")

    async def _notify(self, old_state: int, new_state: int) -> None:
        """Run callbacks outside the lock; they can be sync or async"""
        try:
            if self.on_state_change:
                result = self.on_state_change(self.address, old_state, new_state)
                if asyncio.iscoroutine(result):
                    await result

            if new_state == STATE_ESTABLISHED and self.on_established:
                result = self.on_established(self.address)
                if asyncio.iscoroutine(result):
                    await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"State change callback error: {e}")

    def __repr__(self) -> str:
        return (f"EstablishmentFSM(address={self.address}, generation={self.generation}, "
                f"state={self.get_state_name()})")
