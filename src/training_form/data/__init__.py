"""
Data access layer.

This package contains modules for loading activity records and carry-in seeds.
"""

from .loader import ActivityDataLoader, DataLoaderProtocol

__all__ = [
    "ActivityDataLoader",
    "DataLoaderProtocol",
]
