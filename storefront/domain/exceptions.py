from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class SigningError(DomainError):
    """Signing keys are missing or unusable; startup must not continue."""


class StoreUnavailableError(DomainError):
    """Identity store is unreachable or timed out. Retryable."""


class AuthenticationError(DomainError):
    """Presented credentials do not authenticate anyone. Not retryable."""


class TokenExpiredError(AuthenticationError):
    """Token signature is valid but its expiry has passed."""


class TokenInvalidError(AuthenticationError):
    """Token is malformed, has a bad signature or the wrong type."""


class TokenRevokedError(AuthenticationError):
    """Refresh token no longer matches the identity's stored token."""


class IdentityNotFoundError(AuthenticationError):
    """Token subject has no identity record."""


class InvalidCredentialsError(AuthenticationError):
    """Email or password is wrong."""


class ValidationError(DomainError):
    """Malformed signup or login input."""


class EmailAlreadyExistsError(DomainError):
    """Email is already registered."""


class PermissionDeniedError(DomainError):
    """Identity lacks the role required by the route."""
