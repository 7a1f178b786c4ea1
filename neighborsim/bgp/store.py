"""
Peer Store

Keyed collection of peer configurations and their session records.

The store itself is not synchronized: every call is made by the
Coordinator while it holds its lock. Peer and session entries are
always inserted and deleted together, so a session exists exactly
when its peer does.
"""

import copy
import logging
import time
from typing import Dict, List, Optional

from .peer import PeerConfig
from .session import SessionState
from .constants import STATE_ESTABLISHED, BGPState
from .errors import DuplicatePeer, PeerNotFound, SessionNotFound

logger = logging.getLogger(__name__)


class PeerStore:
    """
    In-memory peer and session tables keyed by peer address
    """

    def __init__(self):
        self.peers: Dict[str, PeerConfig] = {}
        self.sessions: Dict[str, SessionState] = {}

        # Registration generation per address, bumped on every insert
        self.generations: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.peers)

    def __contains__(self, address: str) -> bool:
        return address in self.peers

    def insert(self, config: PeerConfig, generation: int,
               now: Optional[float] = None) -> SessionState:
        """
        Register a peer and its Idle session

        Args:
            config: Validated peer configuration (stored as a private copy)
            generation: Registration token for this address
            now: Creation time (default: time.time())

        Returns:
            The stored session record

        Raises:
            DuplicatePeer: If the address is already registered
        """
        address = config.address
        if address in self.peers:
            raise DuplicatePeer(address=address)

        if now is None:
            now = time.time()

        peer = copy.deepcopy(config)
        peer.created_at = now
        peer.updated_at = now

        session = SessionState.initial(address, now)

        self.peers[address] = peer
        self.sessions[address] = session
        self.generations[address] = generation

        logger.debug(f"Inserted peer {address} generation {generation}")
        return session

    def delete(self, address: str) -> None:
        """
        Drop a peer and its session

        Raises:
            PeerNotFound: If the address is unknown
        """
        if address not in self.peers:
            raise PeerNotFound(address=address)

        del self.peers[address]
        del self.sessions[address]
        del self.generations[address]

    def replace(self, config: PeerConfig, now: Optional[float] = None) -> PeerConfig:
        """
        Replace every non-identity field of an existing peer

        Keeps the original creation time and refreshes the update time.

        Raises:
            PeerNotFound: If the address is unknown
        """
        existing = self.peers.get(config.address)
        if existing is None:
            raise PeerNotFound(address=config.address)

        if now is None:
            now = time.time()

        peer = copy.deepcopy(config)
        peer.created_at = existing.created_at
        peer.updated_at = max(now, existing.updated_at or now)

        self.peers[config.address] = peer
        return peer

    def get_peer(self, address: str) -> PeerConfig:
        peer = self.peers.get(address)
        if peer is None:
            raise PeerNotFound(address=address)
        return peer

    def get_session(self, address: str) -> SessionState:
        session = self.sessions.get(address)
        if session is None:
            raise SessionNotFound(address=address)
        return session

    def is_current(self, address: str, generation: int) -> bool:
        """True while ``generation`` is the live registration for ``address``"""
        return self.generations.get(address) == generation

    def snapshot_peer(self, address: str) -> PeerConfig:
        return copy.deepcopy(self.get_peer(address))

    def snapshot_peers(self) -> List[PeerConfig]:
        """Deep copies of every peer, in insertion order"""
        return [copy.deepcopy(peer) for peer in self.peers.values()]

    def snapshot_sessions(self, now: Optional[float] = None) -> List[SessionState]:
        """Deep copies of every session, in insertion order"""
        if now is None:
            now = time.time()
        return [session.snapshot(now) for session in self.sessions.values()]

    def count_established(self) -> int:
        return sum(1 for s in self.sessions.values() if s.state == STATE_ESTABLISHED)

    def count_by_state(self) -> Dict[str, int]:
        counts = {state.name: 0 for state in BGPState}
        for session in self.sessions.values():
            counts[session.state_name] += 1
        return counts
