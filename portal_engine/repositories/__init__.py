"""
Persistence adapters for the request workflow.
"""

from .base import RequestStore, Row
from .memory import InMemoryRequestStore
from .rest import RestRequestStore

__all__ = ["RequestStore", "Row", "InMemoryRequestStore", "RestRequestStore"]
