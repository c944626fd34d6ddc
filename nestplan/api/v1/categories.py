"""Category CRUD, scoped to the caller's workspace."""

import uuid

from fastapi import APIRouter, HTTPException, status

from nestplan.api.deps import Auth, Session
from nestplan.models.room import Category, CategoryCreate, CategoryRead, CategoryUpdate
from nestplan.repositories.rooms import CategoryRepository

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, auth: Auth, session: Session) -> CategoryRead:
    category = await CategoryRepository(session).add(
        Category(workspace_id=auth.workspace_id, name=body.name, color=body.color)
    )
    await session.commit()
    await session.refresh(category)
    return CategoryRead.model_validate(category)


@router.get("", response_model=list[CategoryRead])
async def list_categories(auth: Auth, session: Session) -> list[CategoryRead]:
    categories = await CategoryRepository(session).for_workspace(auth.workspace_id)
    return [CategoryRead.model_validate(c) for c in categories]


@router.patch("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    auth: Auth,
    session: Session,
) -> CategoryRead:
    category = await _get_or_404(CategoryRepository(session), category_id, auth.workspace_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field == "name":
            continue
        setattr(category, field, value)

    category.touch()
    session.add(category)
    await session.commit()
    await session.refresh(category)
    return CategoryRead.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: uuid.UUID, auth: Auth, session: Session) -> None:
    repo = CategoryRepository(session)
    category = await _get_or_404(repo, category_id, auth.workspace_id)
    await repo.delete(category)
    await session.commit()


async def _get_or_404(
    repo: CategoryRepository, category_id: uuid.UUID, workspace_id: uuid.UUID
) -> Category:
    category = await repo.get(category_id, workspace_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category
