"""Typed data access, one repository per aggregate, all bound to an AsyncSession."""

from nestplan.repositories.activity import ActivityRepository
from nestplan.repositories.budgets import RoomBudgetRepository, SavingsDepositRepository
from nestplan.repositories.companies import CompanyRepository, FeeRuleRepository
from nestplan.repositories.items import ItemRepository
from nestplan.repositories.rooms import CategoryRepository, RoomRepository
from nestplan.repositories.tasks import TaskRepository
from nestplan.repositories.workspaces import ApiTokenRepository, WorkspaceRepository

__all__ = [
    "ActivityRepository",
    "ApiTokenRepository",
    "CategoryRepository",
    "CompanyRepository",
    "FeeRuleRepository",
    "ItemRepository",
    "RoomBudgetRepository",
    "RoomRepository",
    "SavingsDepositRepository",
    "TaskRepository",
    "WorkspaceRepository",
]
