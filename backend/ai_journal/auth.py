"""
Request Authentication
======================
Resolves the ``Authorization: Bearer <jwt>`` header to a Supabase Auth
user id. The journal only needs the id to partition entries; profile
data stays with the identity provider.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ai_journal.db.supabase import get_supabase_client

logger = logging.getLogger(__name__)


def get_authenticated_user_id(authorization: str) -> str:
    """Verify the JWT with Supabase Auth and return the user's id.

    Raises HTTPException 401 if the header is missing, malformed, or the
    token is rejected.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Missing or invalid authorization header", "code": "auth_required"},
        )

    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Empty bearer token", "code": "auth_required"},
        )

    db = get_supabase_client()

    try:
        auth_response = db.auth.get_user(token)
    except Exception as exc:
        logger.warning("Auth token verification failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid or expired token", "code": "auth_invalid"},
        ) from exc

    if not auth_response or not auth_response.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "User not found for token", "code": "auth_invalid"},
        )

    return str(auth_response.user.id)
