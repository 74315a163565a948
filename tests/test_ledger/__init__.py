"""
Tests for the DAOVoting ledger and its read-side helpers.
"""
