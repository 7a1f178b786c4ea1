#!/usr/bin/env python3
"""
neighborsim - BGP Session Simulator

Runs the in-memory session engine: seeds peers from the configuration
file and/or the command line, logs every state change until all sessions
are Established (or the timeout expires), then prints the running
configuration.

Usage:
    python3 -m neighborsim.simulator --config config/neighborsim.yaml
    neighborsim --delay 0.5 --peer 192.0.2.2:65001:65002 --peer 2001:db8::2:65001:65003
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .bgp.coordinator import Coordinator
from .bgp.errors import SessionEngineError
from .bgp.monitor import SessionMonitor, SessionEvent
from .bgp.peer import PeerConfig
from .config import ConfigError, LOG_LEVELS, SimulatorConfig, load_config, parse_duration

logger = logging.getLogger("neighborsim")


def setup_logging(log_level: str = "info", log_file: Optional[str] = None):
    """
    Setup logging configuration

    Args:
        log_level: Logging level (debug, info, warn, error)
        log_file: Optional file that receives a copy of every record
    """
    handlers = [logging.StreamHandler()]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=LOG_LEVELS.get(log_level.lower(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
        force=True
    )


def parse_peer(value: str) -> PeerConfig:
    """
    Parse ADDRESS:LOCAL_ASN:REMOTE_ASN

    The address may itself contain colons (IPv6), so the ASNs are
    taken from the right.

    Raises:
        ValueError: If the value is malformed
    """
    parts = value.rsplit(":", 2)
    if len(parts) != 3:
        raise ValueError(f"peer must be ADDRESS:LOCAL_ASN:REMOTE_ASN, got {value!r}")

    address, local_asn, remote_asn = parts
    try:
        return PeerConfig(address=address, local_asn=int(local_asn), remote_asn=int(remote_asn))
    except ValueError:
        raise ValueError(f"peer ASNs must be integers, got {value!r}") from None


async def run_simulator(config: SimulatorConfig, timeout: float = 60.0,
                        poll_interval: float = 0.5) -> int:
    """
    Run the simulator until every session is Established

    Args:
        config: Validated configuration
        timeout: Maximum seconds to wait for establishment
        poll_interval: Seconds between monitor polls

    Returns:
        Process exit code
    """
    failures = 0

    def log_event(event: SessionEvent):
        logger.info(f"Session {event.describe()}")

    async with Coordinator.from_settings(config.simulation) as engine:
        logger.info(f"Starting simulator: {len(config.peers)} peers, "
                    f"delay={config.simulation.session_state_delay}s, "
                    f"error_injection={config.simulation.error_injection}")

        for peer in config.peers:
            try:
                await engine.add_peer(peer)
            except SessionEngineError as e:
                failures += 1
                logger.error(f"Failed to add peer {peer.address}: {e}")

        monitor = SessionMonitor(engine, poll_interval, on_event=log_event)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            await monitor.poll_once()

            total = await engine.get_peer_count()
            established = await engine.get_established_session_count()
            if established == total:
                logger.info(f"All {total} sessions established")
                break

            if loop.time() >= deadline:
                logger.warning(f"Timeout: {established}/{total} sessions established")
                failures += 1
                break

            await asyncio.sleep(poll_interval)

        print(await engine.get_running_config(), end="")

        stats = await engine.get_statistics()
        logger.info(f"Statistics: {stats}")

    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point
    """
    parser = argparse.ArgumentParser(
        description="neighborsim - BGP session-state simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  neighborsim --delay 500ms \\
      --peer 192.0.2.2:65001:65002 \\
      --peer 192.0.2.3:65001:65001

Note:
  - Command line values override the configuration file
  - IPv6 peers work too: --peer 2001:db8::2:65001:65002
        """
    )

    parser.add_argument("--config", default=None,
                        help="Path to YAML configuration file")
    parser.add_argument("--delay", default=None,
                        help="Inter-state delay (e.g. 2s, 500ms; default: from config or 2s)")
    parser.add_argument("--error-injection", action="store_true",
                        help="Fail every mutating call (fault injection)")
    parser.add_argument("--router-asn", type=int, default=None,
                        help="AS number for the rendered 'router bgp' stanza")
    parser.add_argument("--peer", action="append", default=[],
                        help="Peer as ADDRESS:LOCAL_ASN:REMOTE_ASN (repeatable)")
    parser.add_argument("--timeout", type=float, default=60.0,
                        help="Seconds to wait for establishment (default: 60)")
    parser.add_argument("--poll-interval", type=float, default=0.5,
                        help="Seconds between session polls (default: 0.5)")
    parser.add_argument("--log-level", default=None,
                        choices=['debug', 'info', 'warn', 'error'],
                        help="Log level (default: from config or info)")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else SimulatorConfig()

        if args.delay is not None:
            config.simulation.session_state_delay = parse_duration(args.delay)
        if args.error_injection:
            config.simulation.error_injection = True
        if args.router_asn is not None:
            config.simulation.router_asn = args.router_asn
        if args.log_level:
            config.logging.level = args.log_level
        for peer_arg in args.peer:
            config.peers.append(parse_peer(peer_arg))

        config.validate()

    except (ConfigError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level, config.logging.file)

    try:
        return asyncio.run(run_simulator(config, args.timeout, args.poll_interval))
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
