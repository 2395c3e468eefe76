"""Baseline test data shared by every test run."""

from __future__ import annotations

import os
import secrets
import string
import uuid
from typing import Any

CREDENTIALS_KEY = "user_credentials"

# Domain used for generated accounts; override with SUITE_RUNNER_EMAIL_DOMAIN
DEFAULT_EMAIL_DOMAIN = "example.com"

_FIRST_NAMES = ("Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey", "Riley")
_LAST_NAMES = ("Smith", "Garcia", "Nguyen", "Kowalski", "Okafor", "Jensen")


def _generate_password(length: int = 16) -> str:
    """Generate a password with at least one of each character class."""
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(length))
        if (
            any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c.isdigit() for c in password)
            and any(not c.isalnum() for c in password)
        ):
            return password


def generate_credentials() -> dict[str, str]:
    """Generate a fresh, unique set of user credentials."""
    domain = os.environ.get("SUITE_RUNNER_EMAIL_DOMAIN", DEFAULT_EMAIL_DOMAIN)
    token = uuid.uuid4().hex[:12]
    return {
        "first_name": secrets.choice(_FIRST_NAMES),
        "last_name": secrets.choice(_LAST_NAMES),
        "email": f"qa+{token}@{domain}",
        "password": _generate_password(),
    }


async def prepare_default_data() -> dict[str, Any]:
    """Build the baseline data mapping every test receives."""
    return {CREDENTIALS_KEY: generate_credentials()}
