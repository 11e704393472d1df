from __future__ import annotations

import logging

from storefront.application.dto.auth import AuthTokensOutput, LoginLocalInput
from storefront.application.ports.password_hasher_port import PasswordHasherPort
from storefront.domain.exceptions import InvalidCredentialsError
from storefront.domain.services.credentials import normalize_email, validate_login

from .auth_common import build_auth_tokens_output
from .session_credentials import SessionCredentials


logger = logging.getLogger(__name__)


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        password_hasher: PasswordHasherPort,
        session_credentials: SessionCredentials,
    ):
        self._password_hasher = password_hasher
        self._session_credentials = session_credentials

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        email = normalize_email(command.email)
        validate_login(email=email, password=command.password)

        identity = self._session_credentials.find_by_email(email)
        if identity is None:
            raise InvalidCredentialsError("Invalid email or password.")

        verified, replacement_hash = self._password_hasher.verify_and_update(
            command.password,
            identity.password_hash,
        )
        if not verified:
            raise InvalidCredentialsError("Invalid email or password.")

        if replacement_hash:
            self._session_credentials.update_password_hash(identity.id, replacement_hash)
            logger.info("login_local: password_hash_upgraded identity_id=%s", identity.id)

        tokens = self._session_credentials.issue_session(identity)
        return build_auth_tokens_output(identity, tokens)
