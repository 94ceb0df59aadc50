"""
Session identity helpers.

The funnel never requires a login; it only attaches the signed-in user's id
to saved orders and leads when one is available. Identity is therefore read,
not enforced:

  - Authorization: Bearer <jwt> (HS256, issuer = JWT_ISSUER)
  - `sub` claim → user id
  - Missing, malformed, expired or foreign tokens → no user id
"""
import logging
from typing import Optional

import jwt
from fastapi import Header

from config import settings

logger = logging.getLogger(__name__)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def read_session_user_id(authorization: Optional[str]) -> Optional[str]:
    """Best-effort: the token's `sub`, or None for anything unusable."""
    token = _parse_bearer_token(authorization)
    if not token:
        return None
    if not settings.jwt_secret:
        logger.debug("Bearer token ignored: JWT secret not configured")
        return None
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iss", "sub"]},
        )
    except jwt.InvalidTokenError as e:
        logger.debug(f"Ignoring invalid session token: {e}")
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


async def optional_session_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> Optional[str]:
    return read_session_user_id(authorization)
