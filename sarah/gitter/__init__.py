"""Gitter adapter, resources, and REST and streaming API clients."""

__version__ = "4.0.0"