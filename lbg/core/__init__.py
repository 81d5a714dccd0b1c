"""
Core helpers package for the Bohrium client.

This package contains the pieces the request executor is built on:
settings, the error taxonomy, the envelope codec and the token context.
"""

__all__ = []
