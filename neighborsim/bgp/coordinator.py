"""
Session Engine Coordinator - Main Orchestrator

The Coordinator is the in-memory session engine. It owns:
- The peer store (configurations and session records)
- One establishment FSM task per live peer
- The fault injection policy
- The lock that serializes every read and write of shared state

It implements the SessionEngine contract. Each instance is fully
isolated, so tests and processes construct their own.
"""

import asyncio
import itertools
import logging
import time
from typing import Callable, Dict, List, Optional, Union

from .constants import *
from .errors import SessionEngineError, ValidationError
from .faults import FaultInjector
from .fsm import EstablishmentFSM, SleepFunc
from .interface import SessionEngine
from .peer import PeerConfig
from .running_config import render_running_config
from .session import SessionState
from .store import PeerStore


class Coordinator(SessionEngine):
    """
    In-memory BGP session engine

    Validates and stores peer configuration, simulates session
    establishment in the background, and serves race-free snapshots.
    """

    def __init__(self, state_delay: float = DEFAULT_STATE_DELAY,
                 fault_injection: Union[bool, FaultInjector] = False,
                 router_asn: int = DEFAULT_ROUTER_ASN,
                 sleep: Optional[SleepFunc] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize coordinator

        Args:
            state_delay: Seconds between two establishment states
            fault_injection: Enable fault injection, or a ready FaultInjector
            router_asn: AS number rendered in the running configuration
            sleep: Delay primitive handed to every FSM (default: asyncio.sleep)
            clock: Time source for timestamps (default: time.time)
        """
        if state_delay < 0:
            raise ValueError(f"state delay must be non-negative, got {state_delay}")

        self.state_delay = state_delay
        self.router_asn = router_asn
        self.sleep = sleep
        self.clock = clock or time.time

        if isinstance(fault_injection, FaultInjector):
            self.faults = fault_injection
        else:
            self.faults = FaultInjector(bool(fault_injection))

        self.logger = logging.getLogger(f"Coordinator[AS{router_asn}]")

        # Shared state, guarded by self.lock
        self.store = PeerStore()
        self.lock = asyncio.Lock()

        # Establishment walks, keyed by peer address
        self.fsms: Dict[str, EstablishmentFSM] = {}
        self._generations = itertools.count(1)

        # Optional observer for every state write: (address, old_state, new_state)
        self.on_state_change: Optional[Callable[[str, int, int], None]] = None

    @classmethod
    def from_settings(cls, settings, sleep: Optional[SleepFunc] = None) -> "Coordinator":
        """
        Build a coordinator from simulation settings

        Args:
            settings: Object with session_state_delay, error_injection and router_asn
            sleep: Optional delay primitive
        """
        return cls(state_delay=settings.session_state_delay,
                   fault_injection=settings.error_injection,
                   router_asn=settings.router_asn,
                   sleep=sleep)

    async def __aenter__(self) -> "Coordinator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Mutating operations

    async def add_peer(self, config: PeerConfig) -> None:
        """
        Add BGP peer

        Inserts the configuration and an Idle session in one critical
        section, then schedules the establishment walk.

        Args:
            config: Peer configuration (a PeerConfig or a plain mapping)

        Raises:
            SimulatedFailure: Fault injection enabled
            ValidationError: Empty address or invalid ASN
            DuplicatePeer: Address already registered
        """
        address = _address_of(config)
        try:
            self.faults.check("add peer", address)

            if isinstance(config, dict):
                config = PeerConfig.from_dict(config)
            config.validate()

            async with self.lock:
                generation = next(self._generations)
                self.store.insert(config, generation, self.clock())

                fsm = EstablishmentFSM(config.address, generation, self.store, self.lock,
                                       delay=self.state_delay, sleep=self.sleep,
                                       clock=self.clock)
                fsm.on_state_change = self._on_fsm_state_change
                self.fsms[config.address] = fsm
                fsm.start()

        except SessionEngineError as e:
            self.logger.warning(f"Rejected add peer {address}: {e}")
            raise

        self.logger.info(f"Added peer {config.address} AS{config.remote_asn} "
                         f"({'iBGP' if config.is_ibgp else 'eBGP'})")

    async def remove_peer(self, address: str) -> None:
        """
        Remove BGP peer

        Deletes configuration and session together and cancels the
        peer's establishment walk.

        Raises:
            SimulatedFailure: Fault injection enabled
            PeerNotFound: Address unknown
        """
        try:
            self.faults.check("remove peer", address)

            async with self.lock:
                self.store.delete(address)
                fsm = self.fsms.pop(address, None)
                if fsm:
                    fsm.stop()

        except SessionEngineError as e:
            self.logger.warning(f"Rejected remove peer {address}: {e}")
            raise

        self.logger.info(f"Removed peer {address}")

    async def update_peer(self, config: PeerConfig) -> None:
        """
        Update BGP peer configuration

        Replaces every non-identity field. The session is left untouched.
        An unknown address is reported before the replacement is validated.

        Raises:
            SimulatedFailure: Fault injection enabled
            PeerNotFound: Address unknown
            ValidationError: Invalid replacement configuration
        """
        address = _address_of(config)
        try:
            self.faults.check("update peer", address)

            if isinstance(config, dict):
                config = PeerConfig.from_dict(config)

            async with self.lock:
                self.store.get_peer(config.address)
                config.validate()
                self.store.replace(config, self.clock())

        except SessionEngineError as e:
            self.logger.warning(f"Rejected update peer {address}: {e}")
            raise

        self.logger.info(f"Updated peer {config.address}")

    async def set_session_error(self, address: str, message: str) -> None:
        """
        Record the last error reported for a session

        The state is not changed: sessions only move forward.

        Raises:
            SimulatedFailure: Fault injection enabled
            SessionNotFound: Address unknown
        """
        try:
            self.faults.check("set session error", address)

            async with self.lock:
                session = self.store.get_session(address)
                session.last_error = message

        except SessionEngineError as e:
            self.logger.warning(f"Rejected set session error {address}: {e}")
            raise

        self.logger.warning(f"Session {address} error: {message}")

    async def increment_session_counters(self, address: str, received: int, sent: int) -> None:
        """
        Add to the message counters of a session

        Raises:
            SimulatedFailure: Fault injection enabled
            ValidationError: Negative increment
            SessionNotFound: Address unknown
        """
        try:
            self.faults.check("increment session counters", address)
            if received < 0 or sent < 0:
                raise ValidationError(f"counter increments must be non-negative "
                                      f"(received={received}, sent={sent})", address=address)

            async with self.lock:
                session = self.store.get_session(address)
                session.messages_received += received
                session.messages_sent += sent

        except SessionEngineError as e:
            self.logger.warning(f"Rejected increment counters {address}: {e}")
            raise

    # Read operations

    async def get_session_state(self, address: str) -> SessionState:
        """
        Get session state

        Raises:
            SessionNotFound: Address unknown
        """
        async with self.lock:
            session = self.store.get_session(address).snapshot(self.clock())
        self.logger.debug(f"Session snapshot {address}: {session.state_name}")
        return session

    async def get_all_sessions(self) -> List[SessionState]:
        """Get every session as of one lock acquisition"""
        async with self.lock:
            sessions = self.store.snapshot_sessions(self.clock())
        self.logger.debug(f"Sessions snapshot: {len(sessions)} entries")
        return sessions

    async def get_all_peers(self) -> List[PeerConfig]:
        """Get every peer configuration as of one lock acquisition"""
        async with self.lock:
            peers = self.store.snapshot_peers()
        self.logger.debug(f"Peers snapshot: {len(peers)} entries")
        return peers

    async def get_peer(self, address: str) -> PeerConfig:
        """
        Get one peer configuration

        Raises:
            PeerNotFound: Address unknown
        """
        async with self.lock:
            return self.store.snapshot_peer(address)

    async def get_peer_count(self) -> int:
        async with self.lock:
            return len(self.store)

    async def get_established_session_count(self) -> int:
        async with self.lock:
            return self.store.count_established()

    async def get_running_config(self) -> str:
        """
        Render running configuration

        The snapshot is taken under the lock; rendering happens after
        the lock is released.
        """
        peers = await self.get_all_peers()
        return render_running_config(peers, self.router_asn)

    async def get_statistics(self) -> Dict:
        """
        Get engine statistics

        Returns:
            Dictionary with peer/session counts and engine settings
        """
        async with self.lock:
            stats = {
                'total_peers': len(self.store),
                'established_sessions': self.store.count_established(),
                'sessions_by_state': self.store.count_by_state(),
            }

        stats['active_walks'] = sum(1 for fsm in list(self.fsms.values()) if fsm.is_running())
        stats['fault_injection'] = self.faults.enabled
        stats['state_delay'] = self.state_delay
        return stats

    # Lifecycle

    async def wait_settled(self) -> None:
        """Wait until every in-flight establishment walk has finished"""
        while True:
            tasks = [fsm.task for fsm in list(self.fsms.values()) if fsm.is_running()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def close(self) -> None:
        """Cancel every establishment walk and wait for them to exit"""
        async with self.lock:
            fsms = list(self.fsms.values())
            self.fsms.clear()

        for fsm in fsms:
            fsm.stop()

        tasks = [fsm.task for fsm in fsms if fsm.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self.logger.debug(f"Closed ({len(fsms)} walks stopped)")

    def _on_fsm_state_change(self, address: str, old_state: int, new_state: int):
        """Forward FSM transitions to the coordinator observer"""
        if self.on_state_change:
            return self.on_state_change(address, old_state, new_state)
        return None

    def __repr__(self) -> str:
        return (f"Coordinator(router_asn={self.router_asn}, peers={len(self.store)}, "
                f"state_delay={self.state_delay}, faults={self.faults.enabled})")


def _address_of(config) -> Optional[str]:
    """Target address of a PeerConfig or mapping, for errors and logs"""
    if isinstance(config, dict):
        return config.get("address", config.get("ip_address"))
    return getattr(config, "address", None)
