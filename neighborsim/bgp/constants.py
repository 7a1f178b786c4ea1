"""
BGP Session Engine Constants

State numbering follows RFC 4271 Section 8.2.2 (Idle=0 ... Established=5).
"""

from enum import IntEnum


class BGPState(IntEnum):
    """BGP FSM states in establishment order"""
    Idle = 0
    Connect = 1
    Active = 2
    OpenSent = 3
    OpenConfirm = 4
    Established = 5


# Session States (RFC 4271 Section 8.2.2)
STATE_IDLE = BGPState.Idle
STATE_CONNECT = BGPState.Connect
STATE_ACTIVE = BGPState.Active
STATE_OPENSENT = BGPState.OpenSent
STATE_OPENCONFIRM = BGPState.OpenConfirm
STATE_ESTABLISHED = BGPState.Established

FSM_STATE_NAMES = {state: state.name for state in BGPState}

# Forward-only walk, no skips
STATE_SEQUENCE = (
    STATE_IDLE,
    STATE_CONNECT,
    STATE_ACTIVE,
    STATE_OPENSENT,
    STATE_OPENCONFIRM,
    STATE_ESTABLISHED,
)

# AS number limits (RFC 6793 four-octet AS)
MIN_ASN = 1
MAX_ASN = 4294967295

# Router ASN used for the "router bgp" stanza when none is configured
DEFAULT_ROUTER_ASN = 65000

# Inter-state delay in seconds
DEFAULT_STATE_DELAY = 2.0

# Traffic counters written when a simulated session reaches Established
ESTABLISHED_PREFIXES_RECEIVED = 100
ESTABLISHED_PREFIXES_SENT = 50
ESTABLISHED_MESSAGES_RECEIVED = 1000
ESTABLISHED_MESSAGES_SENT = 900

# Smallest step between two entry timestamps of one session
TIMESTAMP_EPSILON = 1e-6
