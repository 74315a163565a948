"""
Tests for the LocalChain execution environment and ABI codec.
"""
