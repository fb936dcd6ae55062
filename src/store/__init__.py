"""Versioned storage layer.

This package keeps every overwritten, moved or deleted file version
under a parallel history tree and serves them back by generation.
"""
