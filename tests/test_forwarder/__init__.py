"""
Tests for the meta-transaction forwarder: digests, signature recovery,
sequence numbers, signing helpers and execution.
"""
