"""FastAPI dependencies for token authentication and workspace resolution."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from nestplan.core.database import get_session
from nestplan.core.security import hash_api_token
from nestplan.models.base import utcnow
from nestplan.repositories.workspaces import ApiTokenRepository

bearer_scheme = HTTPBearer()


class AuthContext:
    """Resolved identity carried through a request."""

    __slots__ = ("workspace_id", "token_id")

    def __init__(self, workspace_id: uuid.UUID, token_id: uuid.UUID) -> None:
        self.workspace_id = workspace_id
        self.token_id = token_id


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AuthContext:
    """Resolve a bearer API token (looked up by its SHA-256 hash)."""
    api_token = await ApiTokenRepository(session).active_by_hash(
        hash_api_token(credentials.credentials)
    )
    if api_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or revoked API token",
        )

    api_token.last_used_at = utcnow()
    session.add(api_token)
    await session.commit()

    return AuthContext(workspace_id=api_token.workspace_id, token_id=api_token.id)


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
Session = Annotated[AsyncSession, Depends(get_session)]
