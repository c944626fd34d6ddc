"""API token management: create, list, revoke."""

import uuid

from fastapi import APIRouter, HTTPException, status

from nestplan.api.deps import Auth, Session
from nestplan.core.security import generate_api_token, hash_api_token, token_prefix
from nestplan.models.api_token import ApiToken, ApiTokenCreate, ApiTokenCreated, ApiTokenRead
from nestplan.repositories.workspaces import ApiTokenRepository

router = APIRouter(prefix="/api-tokens", tags=["api-tokens"])


@router.post(
    "",
    response_model=ApiTokenCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new API token",
)
async def create_api_token(
    body: ApiTokenCreate,
    auth: Auth,
    session: Session,
) -> ApiTokenCreated:
    """Issue another token for the current workspace, e.g. one per collaborator.

    The raw token is returned once.
    """
    raw_token = generate_api_token()
    token = await ApiTokenRepository(session).add(
        ApiToken(
            workspace_id=auth.workspace_id,
            name=body.name,
            token_hash=hash_api_token(raw_token),
            token_prefix=token_prefix(raw_token),
        )
    )
    await session.commit()
    await session.refresh(token)

    return ApiTokenCreated(
        **ApiTokenRead.model_validate(token).model_dump(),
        raw_token=raw_token,
    )


@router.get("", response_model=list[ApiTokenRead], summary="List workspace API tokens")
async def list_api_tokens(auth: Auth, session: Session) -> list[ApiTokenRead]:
    tokens = await ApiTokenRepository(session).for_workspace(auth.workspace_id)
    return [ApiTokenRead.model_validate(t) for t in tokens]


@router.delete(
    "/{token_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke an API token",
)
async def revoke_api_token(
    token_id: uuid.UUID,
    auth: Auth,
    session: Session,
) -> None:
    """Soft-delete: sets is_active=False. The token can no longer authenticate."""
    token = await ApiTokenRepository(session).get(token_id, auth.workspace_id)
    if token is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Token not found")

    token.is_active = False
    token.touch()
    session.add(token)
    await session.commit()
