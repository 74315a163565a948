"""
Tests for effective caller resolution through a trusted forwarder.
"""

from gasless_dao.ledger import resolve_caller

FORWARDER = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

PAYLOAD = b"\xaa\xbb\xcc\xdd" + b"\x00" * 32
SUFFIX = bytes.fromhex(USER[2:])


class TestResolveCaller:
    """Tests for resolve_caller."""

    def test_trusted_forwarder_with_suffix(self):
        """The last 20 bytes become the caller and are stripped."""
        caller, payload = resolve_caller(FORWARDER, PAYLOAD + SUFFIX, FORWARDER)

        assert caller == USER
        assert payload == PAYLOAD

    def test_direct_caller(self):
        """Calls from anyone else are taken at face value."""
        caller, payload = resolve_caller(OTHER, PAYLOAD + SUFFIX, FORWARDER)

        assert caller == OTHER
        assert payload == PAYLOAD + SUFFIX

    def test_forwarder_with_short_payload(self):
        """Less than an address worth of data leaves the forwarder as caller."""
        caller, payload = resolve_caller(FORWARDER, b"\x01" * 19, FORWARDER)

        assert caller == FORWARDER
        assert payload == b"\x01" * 19

    def test_suffix_only(self):
        """A bare suffix resolves to the user with an empty payload."""
        assert resolve_caller(FORWARDER, SUFFIX, FORWARDER) == (USER, b"")

    def test_case_insensitive_forwarder_match(self):
        caller, _ = resolve_caller(FORWARDER.lower(), PAYLOAD + SUFFIX, FORWARDER)
        assert caller == USER

    def test_spoofed_suffix_from_untrusted_caller(self):
        """Appending an address yourself does not impersonate anyone."""
        caller, _ = resolve_caller(OTHER, SUFFIX, FORWARDER)
        assert caller == OTHER
