"""
Test Fixtures and Utilities

Synthetic catalog, price history and receipt data shared by unit and
integration tests, plus helpers to write them to disk.
"""
