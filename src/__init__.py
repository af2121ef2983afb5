# src/__init__.py — v1
"""chatrouter — multi-provider AI message routing for chat backends."""

from chatrouter.version import __version__

__all__ = ["__version__"]
