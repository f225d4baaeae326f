"""Notifier that records pipeline events in the structured log."""

from typing import Any

from taller.config import get_logger
from taller.core.interfaces.notifier import INotifier

logger = get_logger("taller.events")


class LogNotifier(INotifier):
    """Default notifier: one log line per event."""

    async def notify(self, event: str, payload: dict[str, Any]) -> None:
        logger.info(event, **payload)
