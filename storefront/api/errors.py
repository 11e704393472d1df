from __future__ import annotations

import logging

from fastapi import HTTPException

from storefront.domain.exceptions import (
    DomainError,
    EmailAlreadyExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
    PermissionDeniedError,
    StoreUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
    ValidationError,
)


logger = logging.getLogger(__name__)

STORE_RETRY_AFTER_SECONDS = 5

_ERROR_TABLE: tuple[tuple[type[DomainError], int, str], ...] = (
    (StoreUnavailableError, 503, "STORE_UNAVAILABLE"),
    (TokenExpiredError, 401, "TOKEN_EXPIRED"),
    (TokenRevokedError, 401, "TOKEN_REVOKED"),
    (TokenInvalidError, 401, "TOKEN_INVALID"),
    (IdentityNotFoundError, 401, "IDENTITY_NOT_FOUND"),
    (InvalidCredentialsError, 401, "INVALID_CREDENTIALS"),
    (ValidationError, 400, "VALIDATION_ERROR"),
    (EmailAlreadyExistsError, 400, "EMAIL_ALREADY_EXISTS"),
    (PermissionDeniedError, 403, "PERMISSION_DENIED"),
)


def missing_token_exception(kind: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"error_code": "TOKEN_MISSING", "message": f"No {kind} token provided."},
        headers={"WWW-Authenticate": "Bearer"},
    )


def to_http_exception(exc: DomainError) -> HTTPException:
    for error_type, status_code, error_code in _ERROR_TABLE:
        if isinstance(exc, error_type):
            break
    else:
        raise exc

    headers: dict[str, str] | None = None
    if status_code == 503:
        headers = {"Retry-After": str(STORE_RETRY_AFTER_SECONDS)}
        logger.warning("api_errors: store_unavailable error=%s", exc)
    elif status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(
        status_code=status_code,
        detail={"error_code": error_code, "message": str(exc)},
        headers=headers,
    )
