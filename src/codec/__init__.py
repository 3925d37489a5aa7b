"""Object graph codec.

This package saves object graphs into flat property stores and
reconstructs them, including shared and cyclic references.
"""
