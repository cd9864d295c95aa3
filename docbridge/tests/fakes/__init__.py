"""Fake implementations of core ports for testing.

- FakeDocumentStore: in-memory collections evaluating MongoDB queries
"""

from .store import FakeDocumentStore

__all__ = ["FakeDocumentStore"]
