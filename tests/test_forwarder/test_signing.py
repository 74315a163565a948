"""
Tests for the client-side signing helpers.
"""

from gasless_dao.forwarder import (
    build_domain,
    build_forward_request,
    build_meta_transaction,
    typed_data,
)
from gasless_dao.models import SignedForwardRequest


class TestBuildHelpers:
    """Tests for request and domain builders."""

    def test_domain_defaults(self, forwarder):
        domain = build_domain(forwarder.address, 31337)

        assert domain.name == "MinimalForwarder"
        assert domain.version == "0.0.1"
        assert domain.to_eip712()["verifyingContract"] == forwarder.address

    def test_request_defaults(self, alice, dao):
        request = build_forward_request(alice.address, dao.address, b"\x01", nonce=0)

        assert request.value == 0
        assert request.gas == 300_000

    def test_typed_data_document(self, alice, dao, forwarder):
        request = build_forward_request(alice.address, dao.address, b"\x01", nonce=2)
        document = typed_data(request, build_domain(forwarder.address, 31337))

        assert document["primaryType"] == "ForwardRequest"
        assert set(document["types"]) == {"EIP712Domain", "ForwardRequest"}
        assert document["message"]["from"] == alice.address
        assert document["message"]["nonce"] == 2


class TestBuildMetaTransaction:
    """Tests for build_meta_transaction."""

    def test_uses_current_nonce(self, forwarder, dao, sequence_store, alice):
        sequence_store.increment(alice.address)
        signed = build_meta_transaction(forwarder, dao, alice.key, "vote", 1, 1)

        assert signed.request.nonce == 1
        assert signed.request.data == dao.encode("vote", 1, 1)

    def test_signed_request_verifies(self, forwarder, dao, alice):
        signed = build_meta_transaction(forwarder, dao, alice.key, "getTotalDeposited")

        assert isinstance(signed, SignedForwardRequest)
        assert signed.request.from_ == alice.address
        assert signed.request.to == dao.address
        assert signed.request.data == dao.encode("getTotalDeposited")
        assert forwarder.call("verify", signed.request, signed.signature) is True

    def test_nonce_advances_between_builds(self, forwarder, dao, alice, relayer):
        signed = build_meta_transaction(forwarder, dao, alice.key, "getTotalDeposited")
        forwarder.transact("execute", signed.request, signed.signature, sender=relayer.address)

        assert build_meta_transaction(forwarder, dao, alice.key, "getTotalDeposited").request.nonce == 1

    def test_json_payload(self, forwarder, dao, alice):
        signed = build_meta_transaction(forwarder, dao, alice.key, "getTotalDeposited")
        payload = signed.to_json_payload()

        assert payload["request"]["nonce"] == "0"
        assert payload["request"]["gas"] == "300000"
        assert payload["signature"].startswith("0x")
        assert len(payload["signature"]) == 2 + 130
