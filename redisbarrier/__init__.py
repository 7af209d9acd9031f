"""Distributed barrier synchronization backed by Redis, with a demo command."""

__version__ = "0.1.0"
__all__ = ["barrier", "demo"]