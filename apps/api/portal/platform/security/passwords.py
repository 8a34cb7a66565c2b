from __future__ import annotations

import bcrypt

MAX_PASSWORD_BYTES = 72

# Checked when no stored hash exists, so a missing user costs the same as a wrong secret.
_DUMMY_HASH = bcrypt.hashpw(b"portal-dummy-secret", bcrypt.gensalt(rounds=10))


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str, *, rounds: int = 10) -> str:
    if password_too_long(password):
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    target = password_hash.encode("utf-8") if password_hash else _DUMMY_HASH
    try:
        matched = bcrypt.checkpw(password.encode("utf-8"), target)
    except ValueError:
        # Over-long candidate or a stored value that is not a bcrypt hash.
        return False
    return matched and bool(password_hash)
