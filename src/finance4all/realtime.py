"""
Simulated live feed for the dashboard.

Produces plausible dashboard numbers and nudges them on a timer so clients
can exercise live-update behaviour before real data streams exist.

Timeline once started: ``is_loading`` stays true for ``load_delay``
seconds, then every ``update_interval`` seconds the data is perturbed,
``last_update`` is refreshed and ``is_live`` is raised for
``live_duration`` seconds.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from finance4all.models.dashboard import (
    AccountDistributionPoint,
    CashFlowPoint,
    DashboardChartData,
    DashboardMetrics,
    ExpenseCategoryPoint,
    NetWorthPoint,
    RealtimeDashboardData,
)
from finance4all.utils.date_utils import shift_months

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL = 10.0
DEFAULT_LOAD_DELAY = 1.0
DEFAULT_LIVE_DURATION = 2.0

NET_WORTH_MONTHS = 12
CASH_FLOW_MONTHS = 6
MAX_VARIATION = 0.02

BASE_NET_WORTH = 65000.0
BASE_INCOME = 5200.0
BASE_EXPENSES = 3700.0

EXPENSE_BREAKDOWN = [
    ("Housing", 1200.0),
    ("Food", 600.0),
    ("Transportation", 400.0),
    ("Entertainment", 300.0),
    ("Utilities", 250.0),
    ("Healthcare", 200.0),
    ("Other", 350.0),
]

# (type, assets, investments, debt)
ACCOUNT_DISTRIBUTION = [
    ("Checking", 5000.0, 0.0, 0.0),
    ("Savings", 15000.0, 0.0, 0.0),
    ("Investment", 0.0, 45000.0, 0.0),
    ("Credit Card", 0.0, 0.0, 2500.0),
    ("Loan", 0.0, 0.0, 5000.0),
]

UpdateListener = Callable[[RealtimeDashboardData], None]


def _month_start_iso(now: datetime, months_back: int) -> str:
    first = shift_months(now.replace(day=1), -months_back)
    return datetime(first.year, first.month, 1, tzinfo=timezone.utc).isoformat()


def generate_initial_data(
    now: Optional[datetime] = None, rng: Optional[random.Random] = None
) -> Tuple[DashboardMetrics, DashboardChartData]:
    """Build the starting metrics and chart series, oldest month first."""
    now = now or datetime.now()
    rng = rng or random.Random()

    metrics = DashboardMetrics(
        net_worth=BASE_NET_WORTH,
        monthly_income=BASE_INCOME,
        monthly_expenses=BASE_EXPENSES,
        cash_flow=BASE_INCOME - BASE_EXPENSES,
        net_worth_change_percent=8.5,
        income_change_percent=3.2,
        expenses_change_percent=-1.5,
        cash_flow_change_percent=12.3,
    )

    net_worth = [
        NetWorthPoint(
            month=_month_start_iso(now, i),
            net_worth=50000 + (NET_WORTH_MONTHS - 1 - i) * 3000 + rng.random() * 2000,
        )
        for i in range(NET_WORTH_MONTHS - 1, -1, -1)
    ]
    cash_flow = [
        CashFlowPoint(
            month=_month_start_iso(now, i),
            income=BASE_INCOME + rng.random() * 500 - 250,
            expenses=BASE_EXPENSES + rng.random() * 400 - 200,
        )
        for i in range(CASH_FLOW_MONTHS - 1, -1, -1)
    ]

    chart_data = DashboardChartData(
        net_worth=net_worth,
        cash_flow=cash_flow,
        expense_breakdown=[
            ExpenseCategoryPoint(category=name, amount=amount)
            for name, amount in EXPENSE_BREAKDOWN
        ],
        account_distribution=[
            AccountDistributionPoint(type=kind, assets=assets, investments=inv, debt=debt)
            for kind, assets, inv, debt in ACCOUNT_DISTRIBUTION
        ],
    )
    return metrics, chart_data


def simulate_update(
    metrics: DashboardMetrics,
    chart_data: DashboardChartData,
    rng: Optional[random.Random] = None,
) -> Tuple[DashboardMetrics, DashboardChartData]:
    """
    Perturb the data slightly.

    Every metric moves by at most 2%; in the charts only the latest
    net-worth and cash-flow points change.
    """
    rng = rng or random.Random()

    def vary(value: float) -> float:
        return value * (1 + (rng.random() - 0.5) * 2 * MAX_VARIATION)

    def nudge(value: float, spread: float) -> float:
        return value + (rng.random() - 0.5) * spread

    updated_metrics = DashboardMetrics(
        net_worth=vary(metrics.net_worth),
        monthly_income=vary(metrics.monthly_income),
        monthly_expenses=vary(metrics.monthly_expenses),
        cash_flow=vary(metrics.monthly_income) - vary(metrics.monthly_expenses),
        net_worth_change_percent=nudge(metrics.net_worth_change_percent, 0.5),
        income_change_percent=nudge(metrics.income_change_percent, 0.3),
        expenses_change_percent=nudge(metrics.expenses_change_percent, 0.3),
        cash_flow_change_percent=nudge(metrics.cash_flow_change_percent, 0.5),
    )

    net_worth = list(chart_data.net_worth)
    if net_worth:
        last = net_worth[-1]
        net_worth[-1] = last.model_copy(update={"net_worth": vary(last.net_worth)})

    cash_flow = list(chart_data.cash_flow)
    if cash_flow:
        last = cash_flow[-1]
        cash_flow[-1] = last.model_copy(
            update={"income": vary(last.income), "expenses": vary(last.expenses)}
        )

    return updated_metrics, chart_data.model_copy(
        update={"net_worth": net_worth, "cash_flow": cash_flow}
    )


class RealtimeDashboard:
    """
    Timer-driven dashboard simulator.

    Use as an async context manager, or call ``start()``/``stop()``.
    """

    def __init__(
        self,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
        enabled: bool = True,
        load_delay: float = DEFAULT_LOAD_DELAY,
        live_duration: float = DEFAULT_LIVE_DURATION,
        rng: Optional[random.Random] = None,
    ):
        if update_interval <= 0:
            raise ValueError(f"update_interval must be positive, got {update_interval}")

        self.update_interval = update_interval
        self.enabled = enabled
        self.load_delay = load_delay
        self.live_duration = live_duration
        self._rng = rng or random.Random()

        self.metrics, self.chart_data = generate_initial_data(rng=self._rng)
        self.is_live = False
        self.is_loading = True
        self.last_update: Optional[datetime] = None

        self._listeners: List[UpdateListener] = []
        self._task: Optional[asyncio.Task] = None
        self._live_reset: Optional[asyncio.TimerHandle] = None

    def snapshot(self) -> RealtimeDashboardData:
        return RealtimeDashboardData(
            metrics=self.metrics,
            chart_data=self.chart_data,
            is_live=self.is_live,
            last_update=self.last_update,
            is_loading=self.is_loading,
        )

    def subscribe(self, listener: UpdateListener) -> Callable[[], None]:
        """Call ``listener`` after each update. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def perform_update(self) -> None:
        """
        Apply one simulated update and raise the live flag.

        The flag is cleared after ``live_duration`` by a timer on the running
        event loop. Called outside a loop, it stays raised until the next
        update made from inside one.
        """
        self.metrics, self.chart_data = simulate_update(self.metrics, self.chart_data, self._rng)
        self.last_update = datetime.now()
        self.is_live = True
        logger.debug(f"Dashboard update: net worth {self.metrics.net_worth:.2f}")

        if self._live_reset is not None:
            self._live_reset.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._live_reset = loop.call_later(self.live_duration, self._clear_live)

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _clear_live(self) -> None:
        self.is_live = False
        self._live_reset = None

    async def run(self) -> None:
        """Finish the initial load, then update forever while enabled."""
        await asyncio.sleep(self.load_delay)
        self.is_loading = False
        self.last_update = datetime.now()

        if not self.enabled:
            return

        while True:
            await asyncio.sleep(self.update_interval)
            self.perform_update()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the timer and any pending live-flag reset."""
        if self._live_reset is not None:
            self._live_reset.cancel()
            self._live_reset = None
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def __aenter__(self) -> "RealtimeDashboard":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
