"""
BGP Peer Configuration Tests

Tests for PeerConfig validation and mapping conversion
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../..'))

import unittest
from neighborsim.bgp.peer import PeerConfig
from neighborsim.bgp.errors import ValidationError


class TestPeerConfigDefaults(unittest.TestCase):
    """Test PeerConfig defaults"""

    def test_basic_config(self):
        """Test basic peer configuration"""
        config = PeerConfig(address="192.0.2.2", local_asn=65001, remote_asn=65002)

        self.assertEqual(config.address, "192.0.2.2")
        self.assertEqual(config.local_asn, 65001)
        self.assertEqual(config.remote_asn, 65002)
        self.assertIsNone(config.password)
        self.assertEqual(config.multihop, 0)
        self.assertEqual(config.max_prefixes, 0)
        self.assertIsNone(config.created_at)
        self.assertFalse(config.is_ibgp)

    def test_ibgp_config(self):
        """Test iBGP detection"""
        config = PeerConfig(address="192.0.2.3", local_asn=65001, remote_asn=65001)
        self.assertTrue(config.is_ibgp)


class TestPeerConfigValidation(unittest.TestCase):
    """Test PeerConfig.validate()"""

    def test_valid_config(self):
        """Test fully populated config passes"""
        config = PeerConfig(
            address="192.0.2.2", local_asn=65001, remote_asn=65002,
            password="s3cret", multihop=2, update_source="lo",
            route_map_in="RM-IN", route_map_out="RM-OUT",
            prefix_list_in="PL-IN", prefix_list_out="PL-OUT",
            max_prefixes=1000, local_preference=200
        )
        config.validate()

    def test_empty_address(self):
        """Test empty and blank addresses are rejected"""
        for address in ("", "   "):
            config = PeerConfig(address=address, local_asn=1, remote_asn=2)
            with self.assertRaises(ValidationError) as ctx:
                config.validate()
            self.assertEqual(ctx.exception.field, "address")

    def test_zero_asn(self):
        """Test zero ASNs are rejected"""
        with self.assertRaises(ValidationError) as ctx:
            PeerConfig(address="192.0.2.2", local_asn=0, remote_asn=2).validate()
        self.assertEqual(ctx.exception.field, "local_asn")

        with self.assertRaises(ValidationError) as ctx:
            PeerConfig(address="192.0.2.2", local_asn=1, remote_asn=0).validate()
        self.assertEqual(ctx.exception.field, "remote_asn")

    def test_asn_range(self):
        """Test four-octet ASN bounds"""
        PeerConfig(address="192.0.2.2", local_asn=1, remote_asn=4294967295).validate()

        with self.assertRaises(ValidationError):
            PeerConfig(address="192.0.2.2", local_asn=1, remote_asn=4294967296).validate()
        with self.assertRaises(ValidationError):
            PeerConfig(address="192.0.2.2", local_asn=-5, remote_asn=2).validate()

    def test_asn_type(self):
        """Test non-integer ASNs are rejected"""
        with self.assertRaises(ValidationError):
            PeerConfig(address="192.0.2.2", local_asn="65001", remote_asn=2).validate()
        with self.assertRaises(ValidationError):
            PeerConfig(address="192.0.2.2", local_asn=True, remote_asn=2).validate()

    def test_negative_knobs(self):
        """Test negative multihop / max-prefix / local-pref are rejected"""
        for name in ("multihop", "max_prefixes", "local_preference"):
            config = PeerConfig(address="192.0.2.2", local_asn=1, remote_asn=2)
            setattr(config, name, -1)
            with self.assertRaises(ValidationError) as ctx:
                config.validate()
            self.assertEqual(ctx.exception.field, name)

    def test_validation_error_is_client_error(self):
        """Test error classification"""
        with self.assertRaises(ValidationError) as ctx:
            PeerConfig(address="", local_asn=1, remote_asn=2).validate()
        self.assertTrue(ctx.exception.is_client_error)
        self.assertEqual(ctx.exception.code, "validation_error")


class TestPeerConfigFromDict(unittest.TestCase):
    """Test PeerConfig.from_dict()"""

    def test_short_asn_spelling(self):
        """Test 'asn' maps to local_asn"""
        config = PeerConfig.from_dict({"address": "10.0.0.1", "asn": 1, "remote_asn": 2})
        self.assertEqual(config.local_asn, 1)
        self.assertEqual(config.remote_asn, 2)

    def test_ip_address_alias(self):
        """Test 'ip_address' maps to address"""
        config = PeerConfig.from_dict({"ip_address": "10.0.0.1", "local_asn": 1, "remote_asn": 2})
        self.assertEqual(config.address, "10.0.0.1")

    def test_unknown_and_timestamp_keys_ignored(self):
        """Test unknown keys and store-owned timestamps are dropped"""
        config = PeerConfig.from_dict({
            "address": "10.0.0.1", "asn": 1, "remote_asn": 2,
            "description": "transit", "created_at": 5.0
        })
        self.assertIsNone(config.created_at)

    def test_missing_fields_fail_validation(self):
        """Test missing required keys produce a config that fails validation"""
        config = PeerConfig.from_dict({})
        with self.assertRaises(ValidationError):
            config.validate()

    def test_to_dict(self):
        """Test to_dict exposes every field"""
        config = PeerConfig(address="10.0.0.1", local_asn=1, remote_asn=2, max_prefixes=10)
        data = config.to_dict()
        self.assertEqual(data["address"], "10.0.0.1")
        self.assertEqual(data["max_prefixes"], 10)
        self.assertIn("route_map_in", data)


if __name__ == '__main__':
    unittest.main()
