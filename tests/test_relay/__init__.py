"""
Tests for the relay service and HTTP endpoint.
"""
