"""Property store layer.

This package holds the flat key/value media the codec writes into:
the store contract, an in-memory store and a JSON file store.
"""
