"""Client reference data read by the pipeline gates."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Client(BaseModel):
    """A workshop customer. Maintained elsewhere; the pipeline only reads it."""

    id: int | None = None
    tenant_id: str
    name: str
    tax_id: str | None = None  # RUT
    business_line: str | None = None
    address: str | None = None
    commune: str | None = None
    city: str | None = None
    email: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def has_tax_id(self) -> bool:
        return bool(self.tax_id and self.tax_id.strip())
