"""External adapters for docbridge.

This package contains all external dependencies and provides
implementations of the core port interfaces.

Adapter Organization:

- store/: Adapters for document persistence (MongoDB)
"""
