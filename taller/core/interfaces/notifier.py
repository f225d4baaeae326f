"""Interface for fire-and-forget pipeline notifications."""

from abc import ABC, abstractmethod
from typing import Any


class INotifier(ABC):
    """Delivers pipeline events to whoever listens (mail, websocket, queue)."""

    @abstractmethod
    async def notify(self, event: str, payload: dict[str, Any]) -> None:
        pass
