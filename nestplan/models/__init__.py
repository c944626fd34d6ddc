"""Import all models so SQLModel.metadata picks them up."""

from nestplan.models.activity import ActivityEntry, ActivityRead
from nestplan.models.api_token import ApiToken, ApiTokenCreate, ApiTokenCreated, ApiTokenRead
from nestplan.models.budget import (
    RoomBudget,
    RoomBudgetRead,
    RoomBudgetUpdate,
    SavingsDeposit,
    SavingsDepositCreate,
    SavingsDepositRead,
    SavingsDepositUpdate,
    SavingsTargetSource,
)
from nestplan.models.company import (
    Company,
    CompanyCreate,
    CompanyRead,
    CompanyUpdate,
    FeeRule,
    FeeRuleCreate,
    FeeRuleRead,
    FeeRuleType,
    FeeRuleUpdate,
    FeeTier,
    FeeTierCreate,
    FeeTierRead,
)
from nestplan.models.item import (
    Item,
    ItemCreate,
    ItemPrice,
    ItemPriceCreate,
    ItemPriceRead,
    ItemPurchase,
    ItemRead,
    ItemUpdate,
)
from nestplan.models.room import (
    Category,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    Room,
    RoomCreate,
    RoomRead,
    RoomUpdate,
)
from nestplan.models.task import AssignedTo, Task, TaskCreate, TaskRead, TaskUpdate
from nestplan.models.workspace import Workspace, WorkspaceRead, WorkspaceUpdate

__all__ = [
    "ActivityEntry",
    "ActivityRead",
    "ApiToken",
    "ApiTokenCreate",
    "ApiTokenCreated",
    "ApiTokenRead",
    "AssignedTo",
    "Category",
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "Company",
    "CompanyCreate",
    "CompanyRead",
    "CompanyUpdate",
    "FeeRule",
    "FeeRuleCreate",
    "FeeRuleRead",
    "FeeRuleType",
    "FeeRuleUpdate",
    "FeeTier",
    "FeeTierCreate",
    "FeeTierRead",
    "Item",
    "ItemCreate",
    "ItemPrice",
    "ItemPriceCreate",
    "ItemPriceRead",
    "ItemPurchase",
    "ItemRead",
    "ItemUpdate",
    "Room",
    "RoomBudget",
    "RoomBudgetRead",
    "RoomBudgetUpdate",
    "RoomCreate",
    "RoomRead",
    "RoomUpdate",
    "SavingsDeposit",
    "SavingsDepositCreate",
    "SavingsDepositRead",
    "SavingsDepositUpdate",
    "SavingsTargetSource",
    "Task",
    "TaskCreate",
    "TaskRead",
    "TaskUpdate",
    "Workspace",
    "WorkspaceRead",
    "WorkspaceUpdate",
]
