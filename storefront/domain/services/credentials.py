from __future__ import annotations

import re

from storefront.domain.exceptions import ValidationError


EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 6
MAX_NAME_LENGTH = 120


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_signup(*, name: str, email: str, password: str) -> None:
    if not name.strip():
        raise ValidationError("Name is required.")
    if len(name.strip()) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must have at most {MAX_NAME_LENGTH} characters.")
    validate_email(email)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")


def validate_email(email: str) -> None:
    if not email:
        raise ValidationError("Email is required.")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please provide a valid email address.")


def validate_login(*, email: str, password: str) -> None:
    validate_email(email)
    if not password:
        raise ValidationError("Password is required.")
