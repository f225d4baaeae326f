"""Infrastructure layer implementations."""

from taller.infrastructure import documents, notifications, storage

__all__ = ["storage", "documents", "notifications"]
