"""Error hierarchy for PDS.

Error layers:
- PDSError: Base class for all PDS errors
- DomainError: Business rule violations scoped to a single entity
- InfrastructureError: System-level failures like storage/network issues

Reconciliation drivers log entity-scoped errors and move on; infrastructure
errors raised outside a critical interaction abort the current run.
"""


class PDSError(Exception):
    """Base class for all PDS errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(PDSError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Entity not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class ConflictError(DomainError):
    """Entity was modified since it was read (stale version)."""

    def __init__(self, message: str, entity_id: str | None = None) -> None:
        super().__init__(message, code="VERSION_CONFLICT")
        self.entity_id = entity_id


class RemedialDepositError(DomainError):
    """Deposit cannot progress until an operator fixes its configuration."""

    def __init__(self, message: str, deposit_id: str | None = None) -> None:
        super().__init__(message)
        self.deposit_id = deposit_id


class DepositServiceError(DomainError):
    """A deposit-scoped failure; the deposit is revisited on the next pass."""

    def __init__(self, message: str, deposit_id: str | None = None) -> None:
        super().__init__(message)
        self.deposit_id = deposit_id


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(PDSError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Entity store is unavailable."""


class ExternalServiceError(InfrastructureError):
    """External service (remote repository) is unavailable or failed."""


class StatusResolutionError(ExternalServiceError):
    """A remote status document could not be fetched or parsed."""

    def __init__(self, message: str, reference: str | None = None) -> None:
        super().__init__(message)
        self.reference = reference


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""


class ReconciliationAbortedError(InfrastructureError):
    """A reconciliation run could not continue."""
