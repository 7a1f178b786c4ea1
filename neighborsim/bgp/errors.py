"""
Session Engine Error Handling

Defines the error taxonomy raised by session engine operations.
Every error carries a stable code and whether it is the caller's fault,
so an upstream API layer can map client errors and server errors without
inspecting messages.
"""

from typing import Optional


class SessionEngineError(Exception):
    """Base exception for session engine errors"""

    code = "session_engine_error"
    is_client_error = False

    def __init__(self, message: Optional[str] = None, address: Optional[str] = None):
        """
        Initialize session engine error

        Args:
            message: Human-readable message
            address: Peer address the operation targeted, if any
        """
        self.address = address

        if not message:
            message = self._format_error_message()

        super().__init__(message)

    def _format_error_message(self) -> str:
        """Format human-readable error message"""
        if self.address is not None:
            return f"{self.code} (peer={self.address})"
        return self.code


class ValidationError(SessionEngineError):
    """Malformed or missing peer configuration fields"""

    code = "validation_error"
    is_client_error = True

    def __init__(self, message: Optional[str] = None, address: Optional[str] = None,
                 field: Optional[str] = None):
        self.field = field
        super().__init__(message, address)


class DuplicatePeer(SessionEngineError):
    """Peer address already registered"""

    code = "duplicate_peer"
    is_client_error = True

    def _format_error_message(self) -> str:
        return f"peer {self.address} already exists"


class PeerNotFound(SessionEngineError):
    """Operation on unknown peer address"""

    code = "peer_not_found"
    is_client_error = True

    def _format_error_message(self) -> str:
        return f"peer {self.address} not found"


class SessionNotFound(SessionEngineError):
    """Session lookup on unknown peer address"""

    code = "session_not_found"
    is_client_error = True

    def _format_error_message(self) -> str:
        return f"session for peer {self.address} not found"


class ControlPlaneFailure(SessionEngineError):
    """Downstream control-plane failure"""

    code = "control_plane_failure"
    is_client_error = False


class SimulatedFailure(ControlPlaneFailure):
    """Injected control-plane failure (fault injection enabled)"""

    def __init__(self, operation: str, address: Optional[str] = None):
        self.operation = operation
        super().__init__(f"simulated error: failed to {operation}", address)


# Convenience functions for common errors

def empty_address() -> ValidationError:
    """Peer address missing"""
    return ValidationError("peer address is required", field="address")


def invalid_asn(field: str, value, address: Optional[str] = None) -> ValidationError:
    """ASN zero or outside the four-octet range"""
    return ValidationError(f"{field} must be between 1 and 4294967295, got {value!r}",
                           address=address, field=field)


def negative_value(field: str, value, address: Optional[str] = None) -> ValidationError:
    """Numeric knob below zero"""
    return ValidationError(f"{field} must be non-negative, got {value!r}",
                           address=address, field=field)
