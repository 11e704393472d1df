from __future__ import annotations

import pytest

from fakes import FakeAvailability, FakeIdentityStore, FakePasswordHasher, make_identity, make_token_service
from storefront.application.dto.auth import LoginLocalInput, LogoutInput, RefreshSessionInput, SignupInput
from storefront.application.use_cases.get_profile import GetProfileUseCase
from storefront.application.use_cases.login_local import LoginLocalUseCase
from storefront.application.use_cases.logout_session import LogoutSessionUseCase
from storefront.application.use_cases.refresh_session import RefreshSessionUseCase
from storefront.application.use_cases.session_credentials import SessionCredentials
from storefront.application.use_cases.signup import SignupUseCase
from storefront.domain.exceptions import (
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    StoreUnavailableError,
    TokenInvalidError,
    TokenRevokedError,
    ValidationError,
)


def _session_credentials(store: FakeIdentityStore, availability: FakeAvailability | None = None):
    return SessionCredentials(
        identity_store=store,
        token_port=make_token_service(),
        availability=availability or FakeAvailability(),
        timeout_seconds=1.0,
    )


def _signup(
    store: FakeIdentityStore,
    hasher: FakePasswordHasher | None = None,
    availability: FakeAvailability | None = None,
) -> SignupUseCase:
    return SignupUseCase(
        password_hasher=hasher or FakePasswordHasher(),
        session_credentials=_session_credentials(store, availability),
    )


def _login(
    store: FakeIdentityStore,
    hasher: FakePasswordHasher | None = None,
    availability: FakeAvailability | None = None,
) -> LoginLocalUseCase:
    return LoginLocalUseCase(
        password_hasher=hasher or FakePasswordHasher(),
        session_credentials=_session_credentials(store, availability),
    )


def test_signup_stores_hash_and_opens_session():
    store = FakeIdentityStore()

    output = _signup(store).execute(
        SignupInput(name=" Alice ", email=" Alice@Example.com ", password="secret1")
    )

    stored = store.identities[output.identity.id]
    assert stored.email == "alice@example.com"
    assert stored.name == "Alice"
    assert stored.role == "customer"
    assert stored.password_hash == "hashed::secret1"
    assert stored.refresh_token == output.tokens.refresh_token
    assert not hasattr(output.identity, "password_hash")


def test_signup_rejects_duplicate_email():
    store = FakeIdentityStore()
    _signup(store).execute(SignupInput(name="Alice", email="alice@example.com", password="secret1"))

    with pytest.raises(EmailAlreadyExistsError):
        _signup(store).execute(SignupInput(name="Other", email="ALICE@example.com", password="secret2"))


@pytest.mark.parametrize(
    "name,email,password",
    [
        ("", "alice@example.com", "secret1"),
        ("Alice", "not-an-email", "secret1"),
        ("Alice", "alice@example.com", "short"),
    ],
)
def test_signup_validates_input(name, email, password):
    store = FakeIdentityStore()

    with pytest.raises(ValidationError):
        _signup(store).execute(SignupInput(name=name, email=email, password=password))
    assert store.identities == {}


def test_login_succeeds_with_right_password():
    store = FakeIdentityStore()
    signup_output = _signup(store).execute(
        SignupInput(name="Alice", email="alice@example.com", password="secret1")
    )

    output = _login(store).execute(LoginLocalInput(email="ALICE@example.com", password="secret1"))

    assert output.identity.id == signup_output.identity.id
    assert store.identities[output.identity.id].refresh_token == output.tokens.refresh_token
    assert output.tokens.refresh_token != signup_output.tokens.refresh_token


def test_login_fails_with_wrong_password_and_keeps_slot():
    store = FakeIdentityStore()
    signup_output = _signup(store).execute(
        SignupInput(name="Alice", email="alice@example.com", password="secret1")
    )

    with pytest.raises(InvalidCredentialsError):
        _login(store).execute(LoginLocalInput(email="alice@example.com", password="wrong-password"))
    assert store.identities[signup_output.identity.id].refresh_token == signup_output.tokens.refresh_token


def test_login_fails_for_unknown_email():
    with pytest.raises(InvalidCredentialsError):
        _login(FakeIdentityStore()).execute(LoginLocalInput(email="nobody@example.com", password="secret1"))


def test_login_upgrades_legacy_hash():
    store = FakeIdentityStore()
    identity = make_identity(password_hash="legacy::secret1")
    store.identities[identity.id] = identity

    _login(store, FakePasswordHasher(upgrade_to="hashed::secret1")).execute(
        LoginLocalInput(email="alice@example.com", password="secret1")
    )

    assert store.identities[identity.id].password_hash == "hashed::secret1"


def test_login_during_outage_returns_no_tokens():
    store = FakeIdentityStore()
    identity = make_identity()
    store.identities[identity.id] = identity

    with pytest.raises(StoreUnavailableError):
        _login(store, availability=FakeAvailability(available=False)).execute(
            LoginLocalInput(email="alice@example.com", password="secret1")
        )
    assert store.identities[identity.id].refresh_token is None


class WriteFailingStore(FakeIdentityStore):
    """Reads succeed; identity writes fail as if the connection dropped mid-request."""

    def create_identity(self, **kwargs):
        raise StoreUnavailableError("connection lost")

    def update_password_hash(self, **kwargs):
        raise StoreUnavailableError("connection lost")


def test_signup_outage_during_create_is_reported():
    store = WriteFailingStore()
    availability = FakeAvailability()

    with pytest.raises(StoreUnavailableError):
        _signup(store, availability=availability).execute(
            SignupInput(name="Alice", email="alice@example.com", password="secret1")
        )

    assert availability.outages == 1
    assert store.identities == {}


def test_login_outage_during_hash_upgrade_is_reported_without_tokens():
    store = WriteFailingStore()
    identity = make_identity(password_hash="legacy::secret1")
    store.identities[identity.id] = identity
    availability = FakeAvailability()

    with pytest.raises(StoreUnavailableError):
        _login(store, FakePasswordHasher(upgrade_to="hashed::secret1"), availability).execute(
            LoginLocalInput(email="alice@example.com", password="secret1")
        )

    assert availability.outages == 1
    assert store.refresh_writes == []


def test_refresh_then_logout_then_refresh_is_revoked():
    store = FakeIdentityStore()
    signup_output = _signup(store).execute(
        SignupInput(name="Alice", email="alice@example.com", password="secret1")
    )
    credentials = _session_credentials(store)
    refresh = RefreshSessionUseCase(session_credentials=credentials)

    refreshed = refresh.execute(RefreshSessionInput(refresh_token=signup_output.tokens.refresh_token))
    assert refreshed.identity.id == signup_output.identity.id

    LogoutSessionUseCase(session_credentials=credentials).execute(
        LogoutInput(identity_id=signup_output.identity.id)
    )

    with pytest.raises(TokenRevokedError):
        refresh.execute(RefreshSessionInput(refresh_token=signup_output.tokens.refresh_token))


def test_refresh_requires_a_token():
    refresh = RefreshSessionUseCase(session_credentials=_session_credentials(FakeIdentityStore()))

    with pytest.raises(TokenInvalidError):
        refresh.execute(RefreshSessionInput(refresh_token="   "))


def test_get_profile_returns_public_identity():
    store = FakeIdentityStore()
    signup_output = _signup(store).execute(
        SignupInput(name="Alice", email="alice@example.com", password="secret1")
    )

    profile = GetProfileUseCase(session_credentials=_session_credentials(store)).execute(
        access_token=signup_output.tokens.access_token
    )

    assert profile.id == signup_output.identity.id
    assert profile.email == "alice@example.com"
    assert profile.role == "customer"
