"""Workspace bootstrap and settings endpoints."""

from datetime import date

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from nestplan.api.deps import Auth, AuthContext, Session
from nestplan.core.config import get_settings
from nestplan.core.security import generate_api_token, hash_api_token, token_prefix
from nestplan.models.api_token import ApiToken
from nestplan.models.room import DEFAULT_CATEGORIES, DEFAULT_ROOMS, Category, Room
from nestplan.models.workspace import Workspace, WorkspaceRead, WorkspaceUpdate
from nestplan.repositories.activity import ActivityRepository
from nestplan.repositories.rooms import CategoryRepository, RoomRepository
from nestplan.repositories.workspaces import ApiTokenRepository, WorkspaceRepository
from nestplan.services.activity import ActivityType, record_activity

router = APIRouter(prefix="/workspaces", tags=["workspaces"])

# Settings that may be cleared with an explicit null
_NULLABLE = ("zip", "move_in_date")


# ── Bootstrap request / response schemas ──────────────────────

class WorkspaceBootstrapRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    zip: str | None = Field(default=None, max_length=20)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    sales_tax_rate_pct: float = Field(default=0.0, ge=0.0, le=1.0)
    move_in_date: date | None = None
    seed_defaults: bool = True
    token_name: str = Field(default="default", max_length=255)


class WorkspaceBootstrapResponse(BaseModel):
    workspace: WorkspaceRead
    api_token: str = Field(description="Shown once, store it securely")
    token_prefix: str


async def _seed_defaults(session: AsyncSession, workspace: Workspace) -> None:
    """Starter categories and rooms for a new workspace."""
    categories = CategoryRepository(session)
    rooms = RoomRepository(session)
    for name, color in DEFAULT_CATEGORIES:
        await categories.add(Category(workspace_id=workspace.id, name=name, color=color))
    for name in DEFAULT_ROOMS:
        await rooms.add(Room(workspace_id=workspace.id, name=name))


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "",
    response_model=WorkspaceBootstrapResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a workspace (bootstrap)",
)
async def bootstrap_workspace(
    body: WorkspaceBootstrapRequest,
    session: Session,
) -> WorkspaceBootstrapResponse:
    """Create a workspace, optionally seed it, and issue its first API token.

    This is the only unauthenticated endpoint besides /health.
    The raw API token is returned once.
    """
    workspace = await WorkspaceRepository(session).add(
        Workspace(
            name=body.name,
            zip=body.zip,
            currency=(body.currency or get_settings().default_currency).upper(),
            sales_tax_rate_pct=body.sales_tax_rate_pct,
            move_in_date=body.move_in_date,
        )
    )
    if body.seed_defaults:
        await _seed_defaults(session, workspace)

    raw_token = generate_api_token()
    prefix = token_prefix(raw_token)
    await ApiTokenRepository(session).add(
        ApiToken(
            workspace_id=workspace.id,
            name=body.token_name,
            token_hash=hash_api_token(raw_token),
            token_prefix=prefix,
        )
    )
    await record_activity(
        ActivityRepository(session),
        workspace.id,
        ActivityType.WORKSPACE_CREATED,
        "workspace",
        workspace.id,
        seeded=body.seed_defaults,
    )
    await session.commit()
    await session.refresh(workspace)

    return WorkspaceBootstrapResponse(
        workspace=WorkspaceRead.model_validate(workspace),
        api_token=raw_token,
        token_prefix=prefix,
    )


@router.get("/me", response_model=WorkspaceRead, summary="Get the current workspace")
async def get_current_workspace(auth: Auth, session: Session) -> WorkspaceRead:
    workspace = await _get_or_404(session, auth)
    return WorkspaceRead.model_validate(workspace)


@router.patch("/me", response_model=WorkspaceRead, summary="Update workspace settings")
async def update_current_workspace(
    body: WorkspaceUpdate,
    auth: Auth,
    session: Session,
) -> WorkspaceRead:
    workspace = await _get_or_404(session, auth)
    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("currency"):
        update_data["currency"] = update_data["currency"].upper()
    for field, value in update_data.items():
        if value is None and field not in _NULLABLE:
            continue
        setattr(workspace, field, value)

    workspace.touch()
    session.add(workspace)
    await session.commit()
    await session.refresh(workspace)
    return WorkspaceRead.model_validate(workspace)


async def _get_or_404(session: AsyncSession, auth: AuthContext) -> Workspace:
    workspace = await WorkspaceRepository(session).get(auth.workspace_id)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return workspace
