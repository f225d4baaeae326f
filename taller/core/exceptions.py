"""
Domain exceptions for the workshop pipeline.

Every failure a pipeline operation can report is one of these types. The API
layer maps them onto HTTP status codes; nothing here knows about HTTP.
"""

from typing import Any


class TallerError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(TallerError):
    """Referenced record does not exist for the tenant."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class InvalidStateError(TallerError):
    """Operation not allowed from the record's current status."""

    def __init__(
        self,
        entity: str,
        current: str,
        message: str | None = None,
        target: str | None = None,
    ):
        super().__init__(
            message or f"{entity} cannot move from '{current}' to '{target}'",
            code="INVALID_STATE",
            details={"entity": entity, "current": current, "target": target},
        )


class AlreadyConvertedError(InvalidStateError):
    """Quotation already produced a work order."""

    def __init__(self, quotation_id: int, work_order_id: int):
        super().__init__(
            "quotation",
            "converted",
            message=f"Quotation {quotation_id} was already converted "
            f"to work order {work_order_id}",
        )
        self.code = "ALREADY_CONVERTED"
        self.details.update(
            {"quotation_id": quotation_id, "work_order_id": work_order_id}
        )


class AlreadyInvoicedError(InvalidStateError):
    """Work order already carries an invoice."""

    def __init__(self, work_order_id: int, invoice_id: int | None):
        super().__init__(
            "work_order",
            "invoiced",
            message=f"Work order {work_order_id} is already invoiced",
        )
        self.code = "ALREADY_INVOICED"
        self.details.update({"work_order_id": work_order_id, "invoice_id": invoice_id})


class ValidationError(TallerError):
    """Input validation failed for a single field."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


class ValidationFailedError(TallerError):
    """One or more preconditions failed; carries every collected message."""

    def __init__(self, operation: str, errors: list[str], **extra: Any):
        super().__init__(
            f"{operation} rejected: {len(errors)} problem(s) found",
            code="VALIDATION_FAILED",
            details={"operation": operation, "missing_fields": list(errors), **extra},
        )
        self.errors = list(errors)


class InsufficientStockError(ValidationFailedError):
    """Requested quantities exceed stock on hand."""

    def __init__(self, errors: list[str], shortfalls: list[dict[str, Any]]):
        super().__init__("dispatch", errors, shortfalls=shortfalls)
        self.code = "INSUFFICIENT_STOCK"
        self.shortfalls = shortfalls


class OutOfFoliosError(TallerError):
    """No active, non-exhausted CAF window for the document type."""

    def __init__(self, tenant_id: str, dte_type: int):
        super().__init__(
            f"No folios available for document type {dte_type}; "
            "upload a new CAF to continue",
            code="OUT_OF_FOLIOS",
            details={"tenant_id": tenant_id, "dte_type": dte_type},
        )


class CafConflictError(TallerError):
    """CAF window clashes with one already registered."""

    def __init__(self, dte_type: int, folio_from: int, folio_to: int, reason: str):
        super().__init__(
            f"CAF {folio_from}-{folio_to} for type {dte_type} rejected: {reason}",
            code="CAF_CONFLICT",
            details={
                "dte_type": dte_type,
                "folio_from": folio_from,
                "folio_to": folio_to,
                "reason": reason,
            },
        )


class DocumentBuildError(TallerError):
    """Tax document could not be built from the invoice draft."""

    def __init__(self, reason: str):
        super().__init__(
            f"Tax document build failed: {reason}",
            code="DOCUMENT_BUILD_FAILED",
            details={"reason": reason},
        )


class TransactionFailedError(TallerError):
    """Storage rejected or aborted the transaction."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="TRANSACTION_FAILED",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(TallerError):
    """Configuration error."""

    pass
