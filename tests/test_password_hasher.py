from __future__ import annotations

from passlib.hash import bcrypt

from storefront.infrastructure.security.password_hasher import PasswordHasher


def test_hash_verifies_and_never_stores_plaintext():
    hasher = PasswordHasher()

    password_hash = hasher.hash("secret1")

    assert "secret1" not in password_hash
    assert password_hash.startswith("$argon2")
    assert hasher.verify_and_update("secret1", password_hash) == (True, None)
    assert hasher.verify_and_update("wrong-password", password_hash)[0] is False


def test_legacy_bcrypt_hash_is_upgraded():
    hasher = PasswordHasher()
    legacy_hash = bcrypt.using(rounds=4).hash("secret1")

    verified, replacement = hasher.verify_and_update("secret1", legacy_hash)

    assert verified is True
    assert replacement is not None
    assert replacement.startswith("$argon2")


def test_unreadable_hash_fails_closed():
    assert PasswordHasher().verify_and_update("secret1", "not-a-hash") == (False, None)
