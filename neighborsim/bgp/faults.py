"""
Fault Injection

When enabled, every mutating engine call fails with SimulatedFailure
before any validation or storage work, so callers can be exercised
against control-plane failures deterministically.
"""

import logging
from typing import Optional

from .errors import SimulatedFailure

logger = logging.getLogger(__name__)


class FaultInjector:
    """Engine-level switch forcing mutating calls to fail"""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self.injected = 0

        if enabled:
            logger.warning("Fault injection ENABLED - all mutating calls will fail")

    def enable(self) -> None:
        self.enabled = True
        logger.warning("Fault injection enabled")

    def disable(self) -> None:
        self.enabled = False
        logger.info("Fault injection disabled")

    def check(self, operation: str, address: Optional[str] = None) -> None:
        """
        Fail the operation if injection is on

        Args:
            operation: Operation label used in the error message ("add peer")
            address: Target peer address, if any

        Raises:
            SimulatedFailure: While injection is enabled
        """
        if not self.enabled:
            return

        self.injected += 1
        logger.debug(f"Injecting failure into '{operation}' for {address}")
        raise SimulatedFailure(operation, address)

    def __repr__(self) -> str:
        return f"FaultInjector(enabled={self.enabled}, injected={self.injected})"
