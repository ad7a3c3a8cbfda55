"""Actor resolution for API handlers.

Identity is managed elsewhere; requests carry the acting user's opaque id in
the ``X-Actor-Id`` header and the ledger records it verbatim.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

ACTOR_HEADER = "X-Actor-Id"


def get_current_actor(x_actor_id: Optional[str] = Header(None, alias=ACTOR_HEADER)) -> str:
    """Require a non-empty actor id on the request."""

    actor = (x_actor_id or "").strip()
    if not actor:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Actor identification required",
        )
    return actor
