"""Interfaces to the tax document collaborators."""

from abc import ABC, abstractmethod

from taller.core.entities.invoice import BuiltDocument, InvoiceDraft, InvoiceLine


class IDocumentBuilder(ABC):
    """Builds the tax document for a numbered invoice draft."""

    @abstractmethod
    def build_document(self, draft: InvoiceDraft, lines: list[InvoiceLine]) -> BuiltDocument:
        """
        Build the document and compute its totals.

        Must raise DocumentBuildError when the draft can never yield a usable
        document. Any other exception is treated as a transient build failure.
        """
        pass


class IDocumentSubmitter(ABC):
    """Submits a signed document to the tax authority."""

    @abstractmethod
    async def submit(self, signed_document: str) -> str:
        """Submit and return the authority's tracking id."""
        pass
