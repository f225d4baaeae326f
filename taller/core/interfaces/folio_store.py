"""Abstract interface for CAF folio windows."""

from abc import ABC, abstractmethod

from taller.core.entities.folio import CafFolio


class IFolioStore(ABC):
    """Interface for CAF window persistence."""

    @abstractmethod
    async def get_active_window(self, tenant_id: str, dte_type: int) -> CafFolio | None:
        """The active, non-exhausted window for a document type, if any."""
        pass

    @abstractmethod
    async def advance_cursor(self, window: CafFolio, exhausted: bool) -> bool:
        """
        Move the window past ``window.current_folio``.

        Either increments the cursor or, when ``exhausted`` is set, marks the
        window exhausted and inactive. Only applies if the stored cursor still
        equals ``window.current_folio``; returns whether a row was updated.
        """
        pass

    @abstractmethod
    async def create_window(self, window: CafFolio) -> CafFolio:
        """Register a new CAF window."""
        pass

    @abstractmethod
    async def list_windows(self, tenant_id: str, dte_type: int | None = None) -> list[CafFolio]:
        """List windows, optionally for a single document type."""
        pass
