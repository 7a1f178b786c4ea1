"""
Session Engine Interface

Abstract boundary every session engine implementation exposes to callers
(REST handlers, pollers, broadcasters), whether it simulates establishment
in memory or drives a real routing daemon.
"""

from abc import ABC, abstractmethod
from typing import List

from .peer import PeerConfig
from .session import SessionState


class SessionEngine(ABC):
    """Six-operation control-plane contract"""

    @abstractmethod
    async def add_peer(self, config: PeerConfig) -> None:
        """
        Register a peer and start establishing its session

        Raises:
            ValidationError, DuplicatePeer, ControlPlaneFailure
        """
        pass

    @abstractmethod
    async def remove_peer(self, address: str) -> None:
        """
        Remove a peer and tear down its session

        Raises:
            PeerNotFound, ControlPlaneFailure
        """
        pass

    @abstractmethod
    async def update_peer(self, config: PeerConfig) -> None:
        """
        Replace a peer's non-identity configuration

        Raises:
            ValidationError, PeerNotFound, ControlPlaneFailure
        """
        pass

    @abstractmethod
    async def get_session_state(self, address: str) -> SessionState:
        """
        Get a copy of one session

        Raises:
            SessionNotFound
        """
        pass

    @abstractmethod
    async def get_all_sessions(self) -> List[SessionState]:
        """Get a consistent snapshot of every session"""
        pass

    @abstractmethod
    async def get_running_config(self) -> str:
        """Render the current peer configuration as text"""
        pass


class Connectable(ABC):
    """Connectivity lifecycle for engines backed by an external channel"""

    @abstractmethod
    async def connect(self) -> None:
        """Open the channel to the routing daemon"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the channel"""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        pass
