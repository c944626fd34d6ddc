"""Company and fee-rule persistence."""

import uuid
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from nestplan.models.base import utcnow
from nestplan.models.company import Company, FeeRule, FeeTier
from nestplan.models.item import Item


class CompanyRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(self, workspace_id: uuid.UUID) -> list[Company]:
        stmt = (
            select(Company)
            .where(Company.workspace_id == workspace_id)
            .order_by(Company.name.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, company_id: uuid.UUID, workspace_id: uuid.UUID) -> Company | None:
        stmt = select(Company).where(
            Company.id == company_id,
            Company.workspace_id == workspace_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, company: Company) -> Company:
        self.session.add(company)
        await self.session.flush()
        return company

    async def delete(self, company: Company) -> None:
        """Delete a company together with its fee rules and tiers."""
        rule_ids = select(FeeRule.id).where(FeeRule.company_id == company.id)
        await self.session.execute(
            delete(FeeTier).where(FeeTier.fee_rule_id.in_(rule_ids))  # type: ignore[attr-defined]
        )
        await self.session.execute(delete(FeeRule).where(FeeRule.company_id == company.id))
        await self.session.execute(
            update(Item).where(Item.company_id == company.id).values(company_id=None)
        )
        await self.session.delete(company)
        await self.session.flush()


class FeeRuleRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_company(self, company_id: uuid.UUID) -> list[FeeRule]:
        """All rule versions, newest first."""
        stmt = (
            select(FeeRule)
            .where(FeeRule.company_id == company_id)
            .order_by(FeeRule.version.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, rule_id: uuid.UUID, company_id: uuid.UUID) -> FeeRule | None:
        stmt = select(FeeRule).where(FeeRule.id == rule_id, FeeRule.company_id == company_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def active_rule(self, company_id: uuid.UUID) -> FeeRule | None:
        stmt = (
            select(FeeRule)
            .where(FeeRule.company_id == company_id, FeeRule.active.is_(True))  # type: ignore[attr-defined]
            .order_by(FeeRule.version.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def tiers_for(self, rule_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, list[FeeTier]]:
        """Tiers grouped by rule, each group ordered by threshold."""
        ids = list(rule_ids)
        grouped: dict[uuid.UUID, list[FeeTier]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = (
            select(FeeTier)
            .where(FeeTier.fee_rule_id.in_(ids))  # type: ignore[attr-defined]
            .order_by(FeeTier.threshold_cents.asc(), FeeTier.fee_cents.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        for tier in result.scalars().all():
            grouped[tier.fee_rule_id].append(tier)
        return grouped

    async def deactivate_all(
        self, company_id: uuid.UUID, keep: uuid.UUID | None = None
    ) -> int:
        """Switch off every active rule of a company, optionally sparing ``keep``."""
        stmt = update(FeeRule).where(
            FeeRule.company_id == company_id,
            FeeRule.active.is_(True),  # type: ignore[attr-defined]
        )
        if keep is not None:
            stmt = stmt.where(FeeRule.id != keep)
        result = await self.session.execute(stmt.values(active=False, updated_at=utcnow()))
        return result.rowcount or 0

    async def next_version(self, company_id: uuid.UUID) -> int:
        stmt = select(func.coalesce(func.max(FeeRule.version), 0)).where(
            FeeRule.company_id == company_id
        )
        current = (await self.session.execute(stmt)).scalar_one()
        return int(current) + 1

    async def add(self, rule: FeeRule, tiers: Iterable[FeeTier] = ()) -> FeeRule:
        self.session.add(rule)
        await self.session.flush()  # populate rule.id
        for tier in tiers:
            tier.fee_rule_id = rule.id
            self.session.add(tier)
        await self.session.flush()
        return rule

    async def delete(self, rule: FeeRule) -> None:
        await self.session.execute(delete(FeeTier).where(FeeTier.fee_rule_id == rule.id))
        await self.session.delete(rule)
        await self.session.flush()
