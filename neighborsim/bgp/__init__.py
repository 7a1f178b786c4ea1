"""
BGP Session-State Engine

This package implements an in-memory BGP session engine supporting:
- Peer configuration store with address uniqueness
- Timer-driven establishment FSM (Idle -> ... -> Established), one task per peer
- Race-free snapshots under a single coordinator lock
- Cooperative cancellation of in-flight walks on peer removal
- Deterministic fault injection for resilience testing of callers
- FRR-style running configuration rendering

Main Classes:
    Coordinator: In-memory SessionEngine implementation
    SessionEngine: Six-operation boundary contract
    PeerConfig: Peer configuration record
    SessionState: Session runtime record

Example:
    from neighborsim.bgp import Coordinator, PeerConfig

    async with Coordinator(state_delay=0.5) as engine:
        await engine.add_peer(PeerConfig("192.0.2.2", local_asn=65001, remote_asn=65002))
        session = await engine.get_session_state("192.0.2.2")
"""

from .coordinator import Coordinator
from .interface import SessionEngine, Connectable
from .peer import PeerConfig
from .session import SessionState
from .store import PeerStore
from .fsm import EstablishmentFSM
from .faults import FaultInjector
from .running_config import render_running_config
from .monitor import SessionMonitor, SessionEvent, diff_sessions

# Errors
from .errors import (
    SessionEngineError, ValidationError, DuplicatePeer,
    PeerNotFound, SessionNotFound, ControlPlaneFailure, SimulatedFailure
)

# Constants
from .constants import (
    BGPState, STATE_SEQUENCE, FSM_STATE_NAMES,
    STATE_IDLE, STATE_CONNECT, STATE_ACTIVE, STATE_OPENSENT,
    STATE_OPENCONFIRM, STATE_ESTABLISHED,
    DEFAULT_ROUTER_ASN, DEFAULT_STATE_DELAY
)

__all__ = [
    # Main classes
    'Coordinator', 'SessionEngine', 'Connectable',
    'PeerConfig', 'SessionState', 'PeerStore',
    'EstablishmentFSM', 'FaultInjector',
    'render_running_config',
    'SessionMonitor', 'SessionEvent', 'diff_sessions',

    # Errors
    'SessionEngineError', 'ValidationError', 'DuplicatePeer',
    'PeerNotFound', 'SessionNotFound', 'ControlPlaneFailure', 'SimulatedFailure',

    # Constants
    'BGPState', 'STATE_SEQUENCE', 'FSM_STATE_NAMES',
    'STATE_IDLE', 'STATE_CONNECT', 'STATE_ACTIVE', 'STATE_OPENSENT',
    'STATE_OPENCONFIRM', 'STATE_ESTABLISHED',
    'DEFAULT_ROUTER_ASN', 'DEFAULT_STATE_DELAY',
]
