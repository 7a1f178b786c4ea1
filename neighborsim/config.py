"""
Simulator Configuration

Loads and validates the YAML file read once at startup:

    simulation:
      session_state_delay: 2s     # number of seconds, or "500ms", "2s", "1m"
      error_injection: false
      router_asn: 65000
    logging:
      level: info                 # debug, info, warn, error
      file: logs/neighborsim.log  # optional
    peers:                        # optional, added at startup
      - address: 192.0.2.2
        asn: 65001
        remote_asn: 65002
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import yaml

from .bgp.constants import DEFAULT_ROUTER_ASN, DEFAULT_STATE_DELAY, MIN_ASN, MAX_ASN
from .bgp.errors import ValidationError
from .bgp.peer import PeerConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_DURATION_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


class ConfigError(ValueError):
    """Invalid or unreadable configuration"""


def parse_duration(value: Union[int, float, str]) -> float:
    """
    Parse a duration into seconds

    Args:
        value: Seconds as a number, or a string such as "500ms", "2s", "1.5m"

    Returns:
        Duration in seconds

    Raises:
        ConfigError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match:
            return float(match.group(1)) * _DURATION_UNITS[match.group(2)]
    raise ConfigError(f"invalid duration: {value!r}")


@dataclass
class SimulationSettings:
    """Engine behaviour"""
    session_state_delay: float = DEFAULT_STATE_DELAY
    error_injection: bool = False
    router_asn: int = DEFAULT_ROUTER_ASN


@dataclass
class LoggingSettings:
    """Log level and optional log file"""
    level: str = "info"
    file: Optional[str] = None

    @property
    def level_number(self) -> int:
        return LOG_LEVELS[self.level.lower()]


@dataclass
class SimulatorConfig:
    """Complete simulator configuration"""
    simulation: SimulationSettings = field(default_factory=SimulationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    peers: List[PeerConfig] = field(default_factory=list)

    def validate(self) -> None:
        """
        Validate configuration

        Raises:
            ConfigError: On the first invalid setting
        """
        if self.simulation.session_state_delay < 0:
            raise ConfigError("session state delay must be non-negative")

        if not isinstance(self.simulation.error_injection, bool):
            raise ConfigError("error_injection must be a boolean")

        asn = self.simulation.router_asn
        if isinstance(asn, bool) or not isinstance(asn, int) or not MIN_ASN <= asn <= MAX_ASN:
            raise ConfigError(f"router_asn must be between {MIN_ASN} and {MAX_ASN}, got {asn!r}")

        if not isinstance(self.logging.level, str) or self.logging.level.lower() not in LOG_LEVELS:
            raise ConfigError(f"invalid log level: {self.logging.level} "
                              f"(must be debug, info, warn, or error)")

        seen = set()
        for peer in self.peers:
            try:
                peer.validate()
            except ValidationError as e:
                raise ConfigError(f"invalid peer: {e}") from e
            if peer.address in seen:
                raise ConfigError(f"duplicate peer address: {peer.address}")
            seen.add(peer.address)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SimulatorConfig":
        """
        Build configuration from a parsed YAML mapping

        Raises:
            ConfigError: If a section has the wrong shape
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError("configuration root must be a mapping")

        sim = _section(data, "simulation")
        log = _section(data, "logging")

        simulation = SimulationSettings(
            session_state_delay=parse_duration(sim.get("session_state_delay", DEFAULT_STATE_DELAY)),
            error_injection=sim.get("error_injection", False),
            router_asn=sim.get("router_asn", DEFAULT_ROUTER_ASN),
        )

        logging_settings = LoggingSettings(
            level=str(log.get("level", "info")),
            file=log.get("file") or None,
        )

        peers_data = data.get("peers") or []
        if not isinstance(peers_data, list):
            raise ConfigError("peers must be a list")
        peers = []
        for entry in peers_data:
            if not isinstance(entry, dict):
                raise ConfigError(f"peer entry must be a mapping, got {entry!r}")
            peers.append(PeerConfig.from_dict(entry))

        return cls(simulation=simulation, logging=logging_settings, peers=peers)


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return section


def load_config(path: Union[str, Path]) -> SimulatorConfig:
    """
    Load configuration from a YAML file

    Args:
        path: Path to the YAML file

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    config_path = Path(path)
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config file: {e}") from e

    config = SimulatorConfig.from_dict(data)
    config.validate()

    logger.debug(f"Loaded configuration from {config_path}")
    return config
