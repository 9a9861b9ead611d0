"""
Login sessions in Redis.

Key heritage:session:<id> holds a JSON document with the user id, role and
(for sellers) the store id. The TTL slides on every read.
"""
import json
import secrets
from typing import Optional

import redis.asyncio as aioredis

from app.core.clock import now_local
from app.core.config import settings

SESSION_PREFIX = "heritage:session:"


def _ttl() -> int:
    return settings.SESSION_TIMEOUT_MINUTES * 60


def _key(session_id: str) -> str:
    return f"{SESSION_PREFIX}{session_id}"


async def create_session(
    r: aioredis.Redis,
    user_id: int,
    role: str,
    email: str,
    store_id: Optional[int] = None,
) -> str:
    session_id = secrets.token_urlsafe(32)
    payload = {
        "user_id": user_id,
        "role": role,
        "email": email,
        "store_id": store_id,
        "logged_in_at": now_local().isoformat(),
    }
    await r.set(_key(session_id), json.dumps(payload), ex=_ttl())
    return session_id


async def get_session(r: aioredis.Redis, session_id: str) -> Optional[dict]:
    if not session_id:
        return None
    raw = await r.get(_key(session_id))
    if raw is None:
        return None
    await r.expire(_key(session_id), _ttl())
    try:
        return json.loads(raw)
    except ValueError:
        await r.delete(_key(session_id))
        return None


async def destroy_session(r: aioredis.Redis, session_id: str) -> None:
    if session_id:
        await r.delete(_key(session_id))
