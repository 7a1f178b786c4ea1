"""
Simulator CLI Tests

Tests for peer argument parsing and end-to-end runs of main()
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import io
import tempfile
import logging
import unittest
from contextlib import redirect_stdout, redirect_stderr
from neighborsim.simulator import main, parse_peer, setup_logging


class TestParsePeer(unittest.TestCase):
    """Test parse_peer()"""

    def test_ipv4(self):
        peer = parse_peer("192.0.2.2:65001:65002")
        self.assertEqual(peer.address, "192.0.2.2")
        self.assertEqual(peer.local_asn, 65001)
        self.assertEqual(peer.remote_asn, 65002)

    def test_ipv6(self):
        """Test ASNs are taken from the right of an IPv6 address"""
        peer = parse_peer("2001:db8::2:65001:65003")
        self.assertEqual(peer.address, "2001:db8::2")
        self.assertEqual(peer.remote_asn, 65003)

    def test_malformed(self):
        for value in ("192.0.2.2", "192.0.2.2:65001", "192.0.2.2:a:b"):
            with self.assertRaises(ValueError):
                parse_peer(value)


class TestMain(unittest.TestCase):
    """Test main() end to end"""

    def tearDown(self):
        logging.getLogger().handlers.clear()

    def run_main(self, argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_establishes_and_prints_config(self):
        code, out, _ = self.run_main([
            "--delay", "0", "--poll-interval", "0.01", "--timeout", "5",
            "--log-level", "error",
            "--peer", "192.0.2.2:65001:65002",
            "--peer", "2001:db8::2:65001:65003",
        ])

        self.assertEqual(code, 0)
        self.assertIn("router bgp 65000\n", out)
        self.assertIn(" neighbor 192.0.2.2 remote-as 65002\n", out)
        self.assertIn(" neighbor 2001:db8::2 remote-as 65003\n", out)
        self.assertTrue(out.endswith("end\n"))

    def test_router_asn_override(self):
        code, out, _ = self.run_main([
            "--delay", "0ms", "--poll-interval", "0.01", "--log-level", "error",
            "--router-asn", "64512", "--peer", "192.0.2.2:64512:65002",
        ])

        self.assertEqual(code, 0)
        self.assertIn("router bgp 64512\n", out)

    def test_no_peers(self):
        code, out, _ = self.run_main(["--delay", "0", "--log-level", "error"])

        self.assertEqual(code, 0)
        self.assertNotIn("router bgp", out)

    def test_error_injection_fails(self):
        """Test every add fails and the run reports failure"""
        code, out, _ = self.run_main([
            "--delay", "0", "--poll-interval", "0.01", "--log-level", "error",
            "--error-injection", "--peer", "192.0.2.2:65001:65002",
        ])

        self.assertEqual(code, 1)
        self.assertNotIn("router bgp", out)

    def test_bad_arguments(self):
        for argv in (["--peer", "192.0.2.2"], ["--delay", "soon"],
                     ["--peer", "192.0.2.2:0:65002"],
                     ["--config", "/nonexistent/neighborsim.yaml"]):
            code, _, err = self.run_main(argv)
            self.assertEqual(code, 1, argv)
            self.assertIn("Error:", err)


class TestSetupLogging(unittest.TestCase):
    """Test setup_logging()"""

    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()

    def test_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "sim.log")
            setup_logging("warn", log_file)
            logging.getLogger("neighborsim").warning("written")
            for handler in logging.getLogger().handlers:
                handler.flush()

            self.assertEqual(logging.getLogger().level, logging.WARNING)
            with open(log_file) as f:
                self.assertIn("written", f.read())

            for handler in logging.getLogger().handlers:
                handler.close()
            logging.getLogger().handlers.clear()


if __name__ == '__main__':
    unittest.main()
