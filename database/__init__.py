"""Database package public API."""

from .connection import DocumentStorePool
from .migrations import run_migrations
from .document_store import DocumentRef, DocumentStore, SQLiteDocumentStore, Transaction

__all__ = [
    "DocumentStorePool",
    "run_migrations",
    "DocumentRef",
    "DocumentStore",
    "SQLiteDocumentStore",
    "Transaction",
]
