"""
Sequential fiscal folio allocation.

Folios come from the tenant's active CAF window for the document type and
are issued strictly ascending. A folio is consumed in the same transaction
as the invoice that carries it, so the allocator must be called inside a
locking unit of work and never on its own.
"""

from taller.config import get_logger
from taller.core.exceptions import OutOfFoliosError, TransactionFailedError
from taller.core.interfaces.unit_of_work import IUnitOfWork

logger = get_logger(__name__)


class FolioAllocator:
    """Issues the next folio of a (tenant, document type) pair."""

    async def next_folio(self, uow: IUnitOfWork, tenant_id: str, dte_type: int) -> int:
        """
        Return the next folio and move the window cursor past it.

        Raises:
            OutOfFoliosError: No active, non-exhausted window exists
            TransactionFailedError: The cursor moved under us
        """
        window = await uow.folios.get_active_window(tenant_id, dte_type)
        if window is None:
            logger.warning("folio_unavailable", tenant_id=tenant_id, dte_type=dte_type)
            raise OutOfFoliosError(tenant_id, dte_type)

        folio = window.current_folio
        exhausted = folio >= window.folio_to

        # The lock held by the unit of work makes this a formality; a miss
        # means the caller forgot to lock.
        if not await uow.folios.advance_cursor(window, exhausted=exhausted):
            raise TransactionFailedError("next_folio", "folio cursor changed concurrently")

        logger.info(
            "folio_issued",
            tenant_id=tenant_id,
            dte_type=dte_type,
            folio=folio,
            caf_id=window.id,
            exhausted=exhausted,
        )
        return folio
