"""
Running Configuration Generator

Renders a peer snapshot as an FRR-style configuration dump. Pure: no
I/O, no access to the live store, output depends only on its arguments.
Values are substituted literally into fixed line templates; the text is
a human-readable dump, not something meant to be parsed back.
"""

from typing import Iterable, List

from .constants import DEFAULT_ROUTER_ASN
from .peer import PeerConfig

HEADER = (
    "!",
    "! neighborsim running configuration",
    "!",
    "frr version 8.0",
    "frr defaults traditional",
    "!",
)

FOOTER = (
    "line vty",
    "!",
    "end",
)


def render_neighbor(peer: PeerConfig) -> List[str]:
    """
    Render the neighbor lines for one peer

    Only the remote-as line is unconditional; every other line appears
    when the corresponding knob is set.
    """
    prefix = f" neighbor {peer.address}"
    lines = [f"{prefix} remote-as {peer.remote_asn}"]

    if peer.password:
        lines.append(f"{prefix} password {peer.password}")
    if peer.multihop > 0:
        lines.append(f"{prefix} ebgp-multihop {peer.multihop}")
    if peer.update_source:
        lines.append(f"{prefix} update-source {peer.update_source}")
    if peer.route_map_in:
        lines.append(f"{prefix} route-map {peer.route_map_in} in")
    if peer.route_map_out:
        lines.append(f"{prefix} route-map {peer.route_map_out} out")
    if peer.prefix_list_in:
        lines.append(f"{prefix} prefix-list {peer.prefix_list_in} in")
    if peer.prefix_list_out:
        lines.append(f"{prefix} prefix-list {peer.prefix_list_out} out")
    if peer.max_prefixes > 0:
        lines.append(f"{prefix} maximum-prefix {peer.max_prefixes}")

    return lines


def render_running_config(peers: Iterable[PeerConfig],
                          router_asn: int = DEFAULT_ROUTER_ASN) -> str:
    """
    Render a full running configuration

    Args:
        peers: Peer snapshot, rendered in iteration order
        router_asn: AS number for the "router bgp" stanza

    Returns:
        Newline-terminated configuration text
    """
    lines = list(HEADER)

    peers = list(peers)
    if peers:
        lines.append(f"router bgp {router_asn}")
        for peer in peers:
            lines.extend(render_neighbor(peer))
        lines.append("!")

    lines.extend(FOOTER)
    return "\n".join(lines) + "\n"
