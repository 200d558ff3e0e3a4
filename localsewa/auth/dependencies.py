from __future__ import annotations

from fastapi import HTTPException, Request


def get_current_user(request: Request) -> dict | None:
    """Return the session payload (username, role, user_id, provider_id), or ``None``."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def _require_role(request: Request, roles: tuple[str, ...], detail: str) -> dict:
    user = require_user(request)
    if user.get("role") not in roles:
        raise HTTPException(status_code=403, detail=detail)
    return user


def require_admin(request: Request) -> dict:
    """401 when logged out, 403 for anyone but an admin."""
    return _require_role(request, ("admin",), "Admin access required")


def require_provider_or_admin(request: Request) -> dict:
    """Provider accounts manage their own profile; admins manage any."""
    return _require_role(request, ("provider", "admin"), "Provider access required")
