"""
Shared exceptions for service layer operations.

Every error a caller is expected to correct and retry derives from
ServiceError. The HTTP layer maps each `code` to a fixed status; anything
that is not a ServiceError is treated as an opaque internal failure.
"""


class ServiceError(Exception):
    """Base class for recoverable, caller-facing service errors."""

    code: str = "service_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised for malformed input (bad URL, bad pagination, bad field values)."""

    code = "validation_error"


class NotFoundError(ServiceError):
    """
    Raised when an entity is absent, owned by someone else, or soft-deleted.

    The three cases are indistinguishable to the caller.
    """

    code = "not_found"

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"{entity_name} not found")


class DuplicateNameError(ServiceError):
    """Raised when a category or tag name already exists for the user."""

    code = "duplicate_name"

    def __init__(self, entity_name: str, name: str) -> None:
        self.entity_name = entity_name
        self.name = name
        super().__init__(f"{entity_name} '{name}' already exists")


class InvalidReferenceError(ServiceError):
    """Raised when a referenced category or tag id does not belong to the user."""

    code = "invalid_reference"

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Invalid {entity_name.lower()} reference")


class EmailAlreadyRegisteredError(ServiceError):
    """Raised when registering with an email that already has an account."""

    code = "email_already_registered"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("An account with this email already exists")


class InvalidCredentialsError(ServiceError):
    """Raised for an unknown email or a wrong password (never says which)."""

    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")
