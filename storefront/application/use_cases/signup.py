from __future__ import annotations

from uuid import uuid4

from storefront.application.dto.auth import AuthTokensOutput, SignupInput
from storefront.application.ports.password_hasher_port import PasswordHasherPort
from storefront.domain.exceptions import EmailAlreadyExistsError
from storefront.domain.services.credentials import normalize_email, validate_signup

from .auth_common import build_auth_tokens_output, utcnow
from .session_credentials import SessionCredentials


class SignupUseCase:
    def __init__(
        self,
        *,
        password_hasher: PasswordHasherPort,
        session_credentials: SessionCredentials,
    ):
        self._password_hasher = password_hasher
        self._session_credentials = session_credentials

    def execute(self, command: SignupInput) -> AuthTokensOutput:
        name = command.name.strip()
        email = normalize_email(command.email)
        validate_signup(name=name, email=email, password=command.password)

        if self._session_credentials.find_by_email(email) is not None:
            raise EmailAlreadyExistsError("User already exists.")

        identity = self._session_credentials.create_identity(
            identity_id=str(uuid4()),
            name=name,
            email=email,
            password_hash=self._password_hasher.hash(command.password),
            role="customer",
            created_at=utcnow(),
        )
        tokens = self._session_credentials.issue_session(identity)
        return build_auth_tokens_output(identity, tokens)
