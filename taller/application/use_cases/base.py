"""Shared dependency plumbing for the pipeline use cases."""

from typing import Any

from taller.application.services import get_notifier
from taller.config import get_logger
from taller.core.interfaces.notifier import INotifier
from taller.core.interfaces.unit_of_work import UnitOfWorkFactory

logger = get_logger(__name__)


class PipelineUseCase:
    """
    Base for use cases that work through a unit of work.

    Dependencies are injected for tests and resolved lazily from the
    infrastructure layer otherwise.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory | None = None,
        notifier: INotifier | None = None,
    ):
        self._uow_factory = uow_factory
        self._notifier = notifier

    async def _get_uow_factory(self) -> UnitOfWorkFactory:
        """Return the injected factory or the process-wide one."""
        if self._uow_factory is None:
            from taller.infrastructure.storage.sqlite import get_uow_factory

            self._uow_factory = await get_uow_factory()
        return self._uow_factory

    def _get_notifier(self) -> INotifier:
        if self._notifier is None:
            self._notifier = get_notifier()
        return self._notifier

    async def _publish(self, event: str, payload: dict[str, Any]) -> None:
        """Fire-and-forget notification, sent only after the transaction committed."""
        try:
            await self._get_notifier().notify(event, payload)
        except Exception as e:
            logger.warning("notification_failed", notify_event=event, error=str(e))
