from __future__ import annotations

import logging
from uuid import uuid4

from storefront.application.ports.identity_store_port import IdentityStorePort
from storefront.application.ports.password_hasher_port import PasswordHasherPort
from storefront.application.use_cases.auth_common import utcnow
from storefront.domain.entities.identity import Identity
from storefront.domain.services.credentials import normalize_email, validate_signup


logger = logging.getLogger(__name__)


def seed_admin(
    identity_store: IdentityStorePort,
    password_hasher: PasswordHasherPort,
    *,
    name: str,
    email: str,
    password: str,
) -> Identity:
    """Create the admin identity unless one with that email already exists."""
    email = normalize_email(email)
    validate_signup(name=name, email=email, password=password)

    existing = identity_store.find_by_email(email=email)
    if existing is not None:
        logger.info("seed_admin: already_exists identity_id=%s role=%s", existing.id, existing.role)
        return existing

    identity = identity_store.create_identity(
        identity_id=str(uuid4()),
        name=name.strip(),
        email=email,
        password_hash=password_hasher.hash(password),
        role="admin",
        created_at=utcnow(),
    )
    logger.info("seed_admin: created identity_id=%s", identity.id)
    return identity


def main() -> None:
    from storefront.infrastructure.db.engine import create_schema, get_engine
    from storefront.infrastructure.db.repositories.identity_repository import SqlIdentityRepository
    from storefront.infrastructure.security.password_hasher import PasswordHasher
    from storefront.shared.config import get_settings
    from storefront.shared.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level)
    if not settings.admin_email or not settings.admin_password:
        raise SystemExit("ADMIN_EMAIL and ADMIN_PASSWORD are required.")

    engine = get_engine(settings.database_url, settings.db_timeout_seconds)
    create_schema(engine)
    seed_admin(
        SqlIdentityRepository(engine),
        PasswordHasher(),
        name=settings.admin_name,
        email=settings.admin_email,
        password=settings.admin_password,
    )


if __name__ == "__main__":
    main()
