"""Integration tests for TestRail test-case synchronization.

These tests run the import and close-runs commands end to end: YAML scripts
and plans on disk, the project mapping file, and an in-memory TestRail that
speaks the API v2 path grammar.
"""
