"""End-to-end scenarios against a live MongoDB server."""
