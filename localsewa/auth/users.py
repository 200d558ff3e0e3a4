from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _add_user(username: str, password: str, role: str, user_id: str, provider_id: str | None = None) -> None:
    _users[username] = {
        "password_hash": _hash_password(password),
        "role": role,
        "user_id": user_id,
        "provider_id": provider_id,
    }


def _seed_users() -> None:
    """Pre-seed demo accounts on import; ``provider`` manages provider ``p-ram``."""
    _add_user("user", "user123", "user", "u-1")
    _add_user("sita", "sita123", "user", "u-2")
    _add_user("provider", "provider123", "provider", "u-3", provider_id="p-ram")
    _add_user("admin", "admin123", "admin", "u-0")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the session payload or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {
            "username": username,
            "role": record["role"],
            "user_id": record["user_id"],
            "provider_id": record["provider_id"],
        }
    return None


_seed_users()
