"""
Error taxonomy for Manna Art.

Every error carries a stable code, a user-facing message and the HTTP status
the API layer answers with. Request handlers let these propagate; the
exception handlers in ``manna_art.api`` turn them into ``{"error": ...}``
bodies.
"""

from typing import Any, Dict


class MannaError(Exception):
    """
    Base class for errors surfaced to API callers.

    Attributes:
        code: Stable error code for programmatic handling
        message: Human-readable error description
        status_code: HTTP status used at the request boundary
    """

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {"error": self.message, "code": self.code}


class ValidationError(MannaError):
    """Missing or invalid request fields."""

    code = "VALIDATION_ERROR"
    status_code = 400


class EntitlementError(MannaError):
    code = "ENTITLEMENT_ERROR"
    status_code = 403


class NoActiveSubscription(EntitlementError):
    code = "NO_ACTIVE_SUBSCRIPTION"

    def __init__(self, message: str = "No tienes una suscripción activa"):
        super().__init__(message)


class RegistrationLimitExceeded(EntitlementError):
    code = "REGISTRATION_LIMIT_EXCEEDED"

    def __init__(self, plan: str, limit: int):
        self.plan = plan
        self.limit = limit
        super().__init__(
            f"Has alcanzado el límite de {limit} registros de tu plan {plan}"
        )


class NotFoundError(MannaError):
    code = "NOT_FOUND"
    status_code = 404


class ParentNotFound(NotFoundError):
    code = "PARENT_NOT_FOUND"

    def __init__(self, parent_ip_id: str):
        self.parent_ip_id = parent_ip_id
        super().__init__(
            f"No se encontró el artwork parent con ipId: {parent_ip_id}"
        )


class ParentNotRemixable(ValidationError):
    code = "PARENT_NOT_REMIXABLE"

    def __init__(self, parent_ip_id: str):
        self.parent_ip_id = parent_ip_id
        super().__init__(
            "El artwork parent no tiene license terms. No se pueden crear derivatives."
        )


class StorageUploadFailed(MannaError):
    code = "STORAGE_UPLOAD_FAILED"


class OnChainRegistrationFailed(MannaError):
    code = "ONCHAIN_REGISTRATION_FAILED"


class DerivativeRegistrationFailed(OnChainRegistrationFailed):
    code = "DERIVATIVE_REGISTRATION_FAILED"


class PersistenceError(MannaError):
    code = "PERSISTENCE_ERROR"


class ConfigurationError(MannaError):
    """A collaborator is used without the credentials or ids it needs."""

    code = "CONFIGURATION_ERROR"


class BillingError(MannaError):
    code = "BILLING_ERROR"
