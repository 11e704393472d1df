from __future__ import annotations

import pytest

from fakes import FakeIdentityStore, FakePasswordHasher
from storefront.domain.exceptions import ValidationError
from storefront.infrastructure.db.seeds.seed_admin import seed_admin


def test_seed_admin_creates_admin_once():
    store = FakeIdentityStore()

    first = seed_admin(store, FakePasswordHasher(), name="Admin", email="Admin@Example.com", password="secret1")
    second = seed_admin(store, FakePasswordHasher(), name="Admin", email="admin@example.com", password="other1")

    assert first.role == "admin"
    assert first.email == "admin@example.com"
    assert first.password_hash == "hashed::secret1"
    assert second.id == first.id
    assert len(store.identities) == 1


def test_seed_admin_validates_credentials():
    with pytest.raises(ValidationError):
        seed_admin(FakeIdentityStore(), FakePasswordHasher(), name="Admin", email="admin", password="secret1")
