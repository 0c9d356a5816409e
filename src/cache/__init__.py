"""Persistent memoization layer shared by resolution, acquisition and extraction."""

from .store import CacheStore

__all__ = ["CacheStore"]
