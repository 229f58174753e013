"""
Models for the live dashboard feed.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DashboardMetrics(BaseModel):
    net_worth: float
    monthly_income: float
    monthly_expenses: float
    cash_flow: float
    net_worth_change_percent: float
    income_change_percent: float
    expenses_change_percent: float
    cash_flow_change_percent: float


class NetWorthPoint(BaseModel):
    month: str  # ISO timestamp of the first day of the month
    net_worth: float


class CashFlowPoint(BaseModel):
    month: str
    income: float
    expenses: float


class ExpenseCategoryPoint(BaseModel):
    category: str
    amount: float


class AccountDistributionPoint(BaseModel):
    type: str
    assets: float
    investments: float
    debt: float


class DashboardChartData(BaseModel):
    net_worth: list[NetWorthPoint]
    cash_flow: list[CashFlowPoint]
    expense_breakdown: list[ExpenseCategoryPoint]
    account_distribution: list[AccountDistributionPoint]


class RealtimeDashboardData(BaseModel):
    """Snapshot of the live dashboard state."""

    metrics: DashboardMetrics
    chart_data: DashboardChartData
    is_live: bool
    last_update: Optional[datetime] = None
    is_loading: bool
