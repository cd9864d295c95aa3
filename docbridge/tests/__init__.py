"""Test suite for docbridge.

Organized into four categories:

1. core/: Unit tests for the identifier normalizer, query translator,
   CRUD façade, relations and data source
   - Fast, no database required
   - Uses the in-memory FakeDocumentStore

2. adapters/: Tests for the MongoDB store adapter
   - Driver calls mocked

3. integration/: End-to-end scenarios against a live MongoDB server
   - Skipped unless DOCBRIDGE_TEST_MONGODB_URL is set

4. fakes/: Port implementations for testing
"""
