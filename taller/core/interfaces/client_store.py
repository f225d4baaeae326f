"""Abstract interface for client lookups."""

from abc import ABC, abstractmethod

from taller.core.entities.client import Client


class IClientStore(ABC):
    """Client persistence. The pipeline only reads clients."""

    @abstractmethod
    async def get_client(self, tenant_id: str, client_id: int) -> Client | None:
        """Get client by ID within the tenant."""
        pass

    @abstractmethod
    async def create_client(self, client: Client) -> Client:
        """Create a client (seeding and tests)."""
        pass
