"""Document Store layer - abstraction and HTTP implementation."""

from docsign.store.abstractions import IDocumentStore
from docsign.store.http_store import HttpDocumentStore

__all__ = [
    "IDocumentStore",
    "HttpDocumentStore",
]
