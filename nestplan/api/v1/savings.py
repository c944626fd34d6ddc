"""Savings ledger: signed deposits and withdrawals per room."""

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, status

from nestplan.api.deps import Auth, Session
from nestplan.models.budget import (
    SavingsDeposit,
    SavingsDepositCreate,
    SavingsDepositRead,
    SavingsDepositUpdate,
)
from nestplan.repositories.activity import ActivityRepository
from nestplan.repositories.budgets import SavingsDepositRepository
from nestplan.repositories.rooms import RoomRepository
from nestplan.services import budget_tracking
from nestplan.services.activity import ActivityType, record_activity
from nestplan.services.budget import BudgetValidationError
from nestplan.services.budget_tracking import InsufficientSavingsError

router = APIRouter(prefix="/savings-deposits", tags=["savings"])


def _http_error(exc: BudgetValidationError) -> HTTPException:
    if isinstance(exc, InsufficientSavingsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.post("", response_model=SavingsDepositRead, status_code=status.HTTP_201_CREATED)
async def create_deposit(
    body: SavingsDepositCreate,
    auth: Auth,
    session: Session,
) -> SavingsDepositRead:
    """Record a deposit (positive) or withdrawal (negative) for a room."""
    if await RoomRepository(session).get(body.room_id, auth.workspace_id) is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown room: {body.room_id}",
        )
    try:
        deposit = await budget_tracking.record_deposit(
            SavingsDepositRepository(session),
            auth.workspace_id,
            body.room_id,
            body.amount_cents,
            body.date or datetime.now(timezone.utc).date(),
            body.note,
        )
    except BudgetValidationError as exc:
        raise _http_error(exc) from exc

    await record_activity(
        ActivityRepository(session),
        auth.workspace_id,
        ActivityType.DEPOSIT_RECORDED,
        "savings_deposit",
        deposit.id,
        room_id=body.room_id,
        amount_cents=body.amount_cents,
    )
    await session.commit()
    await session.refresh(deposit)
    return SavingsDepositRead.model_validate(deposit)


@router.get("", response_model=list[SavingsDepositRead])
async def list_deposits(
    auth: Auth,
    session: Session,
    room_id: uuid.UUID | None = Query(default=None),
) -> list[SavingsDepositRead]:
    """Ledger entries, most recent first."""
    deposits = await SavingsDepositRepository(session).for_workspace(auth.workspace_id, room_id)
    return [SavingsDepositRead.model_validate(d) for d in deposits]


@router.patch("/{deposit_id}", response_model=SavingsDepositRead)
async def update_deposit(
    deposit_id: uuid.UUID,
    body: SavingsDepositUpdate,
    auth: Auth,
    session: Session,
) -> SavingsDepositRead:
    deposits = SavingsDepositRepository(session)
    deposit = await _get_or_404(deposits, deposit_id, auth.workspace_id)
    try:
        await budget_tracking.amend_deposit(
            deposits, deposit, body.amount_cents, body.date, body.note
        )
    except BudgetValidationError as exc:
        raise _http_error(exc) from exc

    deposit.touch()
    session.add(deposit)
    await session.commit()
    await session.refresh(deposit)
    return SavingsDepositRead.model_validate(deposit)


@router.delete("/{deposit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deposit(deposit_id: uuid.UUID, auth: Auth, session: Session) -> None:
    deposits = SavingsDepositRepository(session)
    deposit = await _get_or_404(deposits, deposit_id, auth.workspace_id)
    try:
        await budget_tracking.remove_deposit(deposits, deposit)
    except BudgetValidationError as exc:
        raise _http_error(exc) from exc
    await session.commit()


async def _get_or_404(
    deposits: SavingsDepositRepository, deposit_id: uuid.UUID, workspace_id: uuid.UUID
) -> SavingsDeposit:
    deposit = await deposits.get(deposit_id, workspace_id)
    if deposit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Savings entry not found")
    return deposit
