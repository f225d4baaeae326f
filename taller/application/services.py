"""
Service factory functions for dependency injection.

Wires infrastructure implementations to the collaborators the use cases
depend on. Use cases resolve their defaults from here.
"""

from typing import TYPE_CHECKING

from taller.core.services import FolioAllocator

if TYPE_CHECKING:
    from taller.core.interfaces import IDocumentBuilder, INotifier


# Singleton service instances
_document_builder: "IDocumentBuilder | None" = None
_notifier: "INotifier | None" = None
_folio_allocator: FolioAllocator | None = None


def get_document_builder() -> "IDocumentBuilder":
    """Get or create the DTE document builder, configured from fiscal settings."""
    global _document_builder
    if _document_builder is None:
        # Lazy import infrastructure to avoid circular imports
        from taller.infrastructure.documents import DteXmlBuilder

        _document_builder = DteXmlBuilder()
    return _document_builder


def get_notifier() -> "INotifier":
    """Get or create the pipeline event notifier."""
    global _notifier
    if _notifier is None:
        from taller.infrastructure.notifications import LogNotifier

        _notifier = LogNotifier()
    return _notifier


def get_folio_allocator() -> FolioAllocator:
    global _folio_allocator
    if _folio_allocator is None:
        _folio_allocator = FolioAllocator()
    return _folio_allocator


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _document_builder, _notifier, _folio_allocator
    _document_builder = None
    _notifier = None
    _folio_allocator = None
