"""Clients package: the Up Bank source client, the Actual Budget destination client and the budget session contract."""

from .actual_budget import ActualBudgetClient  # noqa: F401
from .base import BudgetSession  # noqa: F401
from .upbank import UpBankClient  # noqa: F401
