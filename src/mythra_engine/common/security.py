"""Request identity and API key dependencies."""

import hmac

from fastapi import Header, HTTPException

from mythra_engine.lifecycle.machine import Actor
from mythra_engine.lifecycle.states import Role

# Roles a caller can only claim by also presenting the admin API key
PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.SYSTEM})


def _key_matches(candidate: str | None, expected: str) -> bool:
    return bool(candidate) and hmac.compare_digest(candidate, expected)


async def require_api_key(
    x_mythra_api_key: str = Header(..., alias="X-Mythra-Api-Key"),
) -> str:
    """FastAPI dependency that validates admin API key from header."""
    from mythra_engine.common.config import get_settings

    settings = get_settings()
    if not _key_matches(x_mythra_api_key, settings.api_key):
        raise HTTPException(status_code=403, detail="Invalid API key")
    return x_mythra_api_key


async def get_actor(
    x_mythra_actor_id: str = Header(..., alias="X-Mythra-Actor-Id"),
    x_mythra_role: str = Header(..., alias="X-Mythra-Role"),
    x_mythra_api_key: str = Header(None, alias="X-Mythra-Api-Key"),
) -> Actor:
    """Resolve the calling identity from request headers.

    Organizers and investors are identified by id alone; admin and system
    callers must also present the API key.
    """
    from mythra_engine.common.config import get_settings

    actor_id = x_mythra_actor_id.strip()
    if not actor_id:
        raise HTTPException(status_code=401, detail="Missing actor id")
    try:
        role = Role(x_mythra_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_mythra_role}'")

    if role in PRIVILEGED_ROLES:
        if not _key_matches(x_mythra_api_key, get_settings().api_key):
            raise HTTPException(status_code=403, detail="Invalid API key")
    return Actor(id=actor_id, role=role)
