class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConfigurationError(Exception):
    """Programming or configuration mistake.

    Never a DomainError: these must fail the request instead of being
    reported back to the user as a normal outcome.
    """


class UnknownRoleError(ConfigurationError):
    """Raised when a value is not one of the known roles."""


class AmbiguousGateError(ConfigurationError):
    """Raised when a gate defines both required roles and a minimum role."""


class UnknownGateError(ConfigurationError):
    """Raised when a named gate is not in the catalog."""
