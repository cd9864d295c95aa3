"""Tests for adapter implementations.

Live MongoDB tests are skipped unless DOCBRIDGE_TEST_MONGODB_URL is set.
"""
