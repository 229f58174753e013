"""
Financial calculations: net worth, cash flow, long-term projection and
the dashboard summary.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from finance4all.core.database import FinanceDatabase
from finance4all.models.account import AccountType
from finance4all.models.reports import (
    AccountBalance,
    CashFlowResult,
    CategoryAmount,
    DashboardSummary,
    MetricData,
    Milestones,
    MonthlyCashFlow,
    NetWorthResult,
    Period,
    ProjectionAssumptions,
    ProjectionResult,
    ProjectionYear,
)
from finance4all.models.transaction import TransactionType
from finance4all.utils.date_utils import (
    get_date_range,
    get_month_range,
    month_key,
    shift_months,
)

logger = logging.getLogger(__name__)

PROJECTION_YEARS = 30
MILLIONAIRE_THRESHOLD = 1_000_000
RETIREMENT_MULTIPLIER = 25  # 4% withdrawal rule
DEBT_PAYDOWN_SHARE = 0.1
UNCATEGORIZED = "Uncategorized"


def calculate_net_worth(db: FinanceDatabase, user_id: str) -> NetWorthResult:
    """
    Calculate net worth across a user's active accounts.

    Debt and liability balances are stored as negative numbers, so their
    absolute value is subtracted.
    """
    accounts = db.get_accounts(user_id, is_active=True)

    totals: Dict[AccountType, float] = defaultdict(float)
    for account in accounts:
        if account.is_liability:
            totals[account.type] += abs(account.balance)
        else:
            totals[account.type] += account.balance

    total_assets = totals[AccountType.ASSET]
    total_investments = totals[AccountType.INVESTMENT]
    total_debts = totals[AccountType.DEBT]
    total_liabilities = totals[AccountType.LIABILITY]

    return NetWorthResult(
        total_assets=total_assets,
        total_investments=total_investments,
        total_debts=total_debts,
        total_liabilities=total_liabilities,
        net_worth=(total_assets + total_investments) - (total_debts + total_liabilities),
        accounts=[
            AccountBalance(id=a.id, name=a.name, type=a.type, balance=a.balance)
            for a in accounts
        ],
        calculated_at=datetime.now(),
    )


def calculate_cash_flow(
    db: FinanceDatabase, user_id: str, start_date: datetime, end_date: datetime
) -> CashFlowResult:
    """
    Aggregate income and expenses between two dates (inclusive).

    Transfers move money between the user's own accounts and are ignored.
    """
    transactions = db.get_transactions_between(user_id, start_date, end_date)
    category_names = {c.id: c.name for c in db.get_categories(user_id)}

    buckets: Dict[TransactionType, Dict[Optional[str], float]] = {
        TransactionType.INCOME: {},
        TransactionType.EXPENSE: {},
    }
    monthly: Dict[str, Dict[TransactionType, float]] = {}

    for txn in transactions:
        if txn.type not in buckets:
            continue
        by_category = buckets[txn.type]
        by_category[txn.category_id] = by_category.get(txn.category_id, 0.0) + txn.amount

        month = monthly.setdefault(
            month_key(txn.date), {TransactionType.INCOME: 0.0, TransactionType.EXPENSE: 0.0}
        )
        month[txn.type] += txn.amount

    def _category_list(by_category: Dict[Optional[str], float]) -> List[CategoryAmount]:
        return [
            CategoryAmount(
                category_id=category_id,
                category_name=category_names.get(category_id, UNCATEGORIZED)
                if category_id
                else UNCATEGORIZED,
                amount=amount,
            )
            for category_id, amount in by_category.items()
        ]

    total_income = sum(buckets[TransactionType.INCOME].values())
    total_expenses = sum(buckets[TransactionType.EXPENSE].values())

    monthly_breakdown = [
        MonthlyCashFlow(
            month=month,
            income=values[TransactionType.INCOME],
            expenses=values[TransactionType.EXPENSE],
            net_cash_flow=values[TransactionType.INCOME] - values[TransactionType.EXPENSE],
        )
        for month, values in sorted(monthly.items())
    ]

    return CashFlowResult(
        period=Period(start_date=start_date, end_date=end_date),
        total_income=total_income,
        total_expenses=total_expenses,
        net_cash_flow=total_income - total_expenses,
        income_by_category=_category_list(buckets[TransactionType.INCOME]),
        expenses_by_category=_category_list(buckets[TransactionType.EXPENSE]),
        monthly_breakdown=monthly_breakdown,
        calculated_at=datetime.now(),
    )


def calculate_projection(
    db: FinanceDatabase,
    user_id: str,
    assumptions: ProjectionAssumptions,
    user_age: Optional[int] = None,
) -> ProjectionResult:
    """
    Project net worth 30 years ahead.

    Starting income and expenses come from the last 12 months of cash
    flow unless the assumptions override them.
    """
    net_worth = calculate_net_worth(db, user_id)
    start, end = get_date_range(12)
    cash_flow = calculate_cash_flow(db, user_id, start, end)

    annual_income = assumptions.expected_salary or cash_flow.total_income
    annual_expenses = assumptions.expected_expenses or cash_flow.total_expenses

    years, milestones = project_years(
        assets=net_worth.total_assets,
        investments=net_worth.total_investments,
        debts=net_worth.total_debts,
        annual_income=annual_income,
        annual_expenses=annual_expenses,
        assumptions=assumptions,
        user_age=user_age,
    )

    return ProjectionResult(
        assumptions=assumptions,
        current_net_worth=net_worth.net_worth,
        projected_years=years,
        milestones=milestones,
        calculated_at=datetime.now(),
    )


def project_years(
    assets: float,
    investments: float,
    debts: float,
    annual_income: float,
    annual_expenses: float,
    assumptions: ProjectionAssumptions,
    user_age: Optional[int] = None,
) -> Tuple[List[ProjectionYear], Milestones]:
    """
    Run the year-by-year projection from a starting position.

    Year 0 is the starting position. In later years income grows by the
    income growth rate, expenses by inflation and investments by the
    investment return. Positive savings are invested and a tenth of them
    pays down debt; negative savings drain cash assets, then investments.
    """
    years: List[ProjectionYear] = []
    milestones = Milestones()
    income = annual_income
    expenses = annual_expenses
    retirement_target = annual_expenses * RETIREMENT_MULTIPLIER

    for year in range(PROJECTION_YEARS + 1):
        if year > 0:
            income *= 1 + assumptions.income_growth_rate / 100
            expenses *= 1 + assumptions.inflation_rate / 100
            investments *= 1 + assumptions.investment_return / 100

            savings = income - expenses
            if savings > 0:
                investments += savings
            elif assets >= abs(savings):
                assets += savings
            else:
                investments += savings + assets
                assets = 0.0

            if debts > 0 and savings > 0:
                payment = min(savings * DEBT_PAYDOWN_SHARE, debts)
                debts -= payment
                investments -= payment

        net_worth = (assets + investments) - debts

        years.append(
            ProjectionYear(
                year=year,
                age=user_age + year if user_age is not None else None,
                net_worth=round(net_worth),
                total_assets=round(assets),
                total_investments=round(investments),
                total_debts=round(debts),
                annual_income=round(income),
                annual_expenses=round(expenses),
                annual_savings=round(income - expenses),
            )
        )

        if milestones.debt_free_year is None and debts <= 0:
            milestones.debt_free_year = year
        if milestones.millionaire_year is None and net_worth >= MILLIONAIRE_THRESHOLD:
            milestones.millionaire_year = year
        if milestones.retirement_ready_year is None and net_worth >= retirement_target:
            milestones.retirement_ready_year = year

    return years, milestones


def calculate_dashboard_summary(db: FinanceDatabase, user_id: str) -> DashboardSummary:
    """
    Build the dashboard metrics for the current month.

    Income, expenses and cash flow are compared with the previous calendar
    month. Balances are not versioned, so last month's net worth is
    estimated by backing out this month's net cash flow.
    """
    now = datetime.now()
    previous = shift_months(now.replace(day=1), -1)

    current_flow = calculate_cash_flow(db, user_id, *get_month_range(now.year, now.month))
    previous_flow = calculate_cash_flow(
        db, user_id, *get_month_range(previous.year, previous.month)
    )
    net_worth = calculate_net_worth(db, user_id).net_worth

    return DashboardSummary(
        net_worth=metric(net_worth, net_worth - current_flow.net_cash_flow),
        monthly_income=metric(current_flow.total_income, previous_flow.total_income),
        monthly_expenses=metric(current_flow.total_expenses, previous_flow.total_expenses),
        cash_flow=metric(current_flow.net_cash_flow, previous_flow.net_cash_flow),
    )


def metric(current: float, previous: float) -> MetricData:
    """Pair two values with the percent change between them (0 when previous is 0)."""
    if previous == 0:
        change = 0.0
    else:
        change = round((current - previous) / abs(previous) * 100, 2)
    return MetricData(current=current, previous=previous, change_percent=change)
