"""
BGP Peer Configuration

PeerConfig holds the operator-facing configuration of one neighbor.
The address is the identity key: it is never rewritten by an update,
a change of address is a remove followed by an add.
"""

from dataclasses import dataclass, fields
from typing import Optional

from .constants import MIN_ASN, MAX_ASN
from .errors import empty_address, invalid_asn, negative_value


@dataclass
class PeerConfig:
    """Configuration for a BGP peer"""
    # Required fields (no defaults)
    address: str
    local_asn: int
    remote_asn: int

    # Optional fields (with defaults)
    password: Optional[str] = None
    multihop: int = 0  # 0 = directly connected
    update_source: Optional[str] = None

    # Policy
    route_map_in: Optional[str] = None
    route_map_out: Optional[str] = None
    prefix_list_in: Optional[str] = None
    prefix_list_out: Optional[str] = None

    max_prefixes: int = 0  # 0 = unlimited
    local_preference: int = 0

    # Set by the store
    created_at: Optional[float] = None
    updated_at: Optional[float] = None

    @property
    def is_ibgp(self) -> bool:
        return self.local_asn == self.remote_asn

    def validate(self) -> None:
        """
        Check required fields and value ranges

        Raises:
            ValidationError: On the first offending field
        """
        if not isinstance(self.address, str) or not self.address.strip():
            raise empty_address()

        for name in ("local_asn", "remote_asn"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or \
                    not MIN_ASN <= value <= MAX_ASN:
                raise invalid_asn(name, value, self.address)

        for name in ("multihop", "max_prefixes", "local_preference"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise negative_value(name, value, self.address)

    @classmethod
    def from_dict(cls, data: dict) -> "PeerConfig":
        """
        Build a PeerConfig from a mapping (YAML / JSON body)

        Accepts both ``local_asn`` and the short ``asn`` spelling, and
        ``ip_address`` as an alias of ``address``. Unknown keys are ignored.
        """
        data = dict(data)
        if "asn" in data and "local_asn" not in data:
            data["local_asn"] = data.pop("asn")
        if "ip_address" in data and "address" not in data:
            data["address"] = data.pop("ip_address")

        known = {f.name for f in fields(cls)} - {"created_at", "updated_at"}
        kwargs = {k: v for k, v in data.items() if k in known}
        kwargs.setdefault("address", "")
        kwargs.setdefault("local_asn", 0)
        kwargs.setdefault("remote_asn", 0)
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
