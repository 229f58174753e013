"""
Result models for net worth, cash flow, projection and dashboard reports.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finance4all.models.account import AccountType


class AccountBalance(BaseModel):
    id: str
    name: str
    type: AccountType
    balance: float


class NetWorthResult(BaseModel):
    """Net worth snapshot across a user's active accounts."""

    total_assets: float
    total_investments: float
    total_debts: float
    total_liabilities: float
    net_worth: float
    accounts: list[AccountBalance]
    calculated_at: datetime


class Period(BaseModel):
    start_date: datetime
    end_date: datetime


class CategoryAmount(BaseModel):
    category_id: Optional[str] = None  # None for uncategorized
    category_name: str
    amount: float


class MonthlyCashFlow(BaseModel):
    month: str  # YYYY-MM
    income: float
    expenses: float
    net_cash_flow: float


class CashFlowResult(BaseModel):
    """Income and expenses for a date range."""

    period: Period
    total_income: float
    total_expenses: float
    net_cash_flow: float
    income_by_category: list[CategoryAmount]
    expenses_by_category: list[CategoryAmount]
    monthly_breakdown: list[MonthlyCashFlow]
    calculated_at: datetime


class ProjectionAssumptions(BaseModel):
    """Annual rates are percentages, e.g. 7 for 7%."""

    income_growth_rate: float = Field(ge=-100, le=100)
    investment_return: float = Field(ge=-100, le=100)
    inflation_rate: float = Field(ge=-10, le=50)
    expected_salary: Optional[float] = Field(default=None, ge=0)
    expected_expenses: Optional[float] = Field(default=None, ge=0)


class ProjectionYear(BaseModel):
    year: int
    age: Optional[int] = None
    net_worth: int
    total_assets: int
    total_investments: int
    total_debts: int
    annual_income: int
    annual_expenses: int
    annual_savings: int


class Milestones(BaseModel):
    debt_free_year: Optional[int] = None
    millionaire_year: Optional[int] = None
    retirement_ready_year: Optional[int] = None


class ProjectionResult(BaseModel):
    assumptions: ProjectionAssumptions
    current_net_worth: float
    projected_years: list[ProjectionYear]
    milestones: Milestones
    calculated_at: datetime


class MetricData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current: float
    previous: float
    change_percent: float


class DashboardSummary(BaseModel):
    """Key dashboard metrics, each compared with the previous month."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    net_worth: MetricData
    monthly_income: MetricData
    monthly_expenses: MetricData
    cash_flow: MetricData
