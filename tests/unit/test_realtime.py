"""
Unit tests for the simulated live dashboard feed.
"""

import asyncio
import random
from datetime import datetime

import pytest

from finance4all.realtime import (
    ACCOUNT_DISTRIBUTION,
    EXPENSE_BREAKDOWN,
    MAX_VARIATION,
    RealtimeDashboard,
    generate_initial_data,
    simulate_update,
)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.mark.unit
class TestGenerateInitialData:
    def test_metrics(self, rng):
        metrics, _ = generate_initial_data(rng=rng)

        assert metrics.net_worth == 65000
        assert metrics.monthly_income == 5200
        assert metrics.monthly_expenses == 3700
        assert metrics.cash_flow == 1500
        assert metrics.expenses_change_percent == -1.5

    def test_month_series_oldest_first(self, rng):
        _, chart = generate_initial_data(now=datetime(2026, 3, 15), rng=rng)

        assert len(chart.net_worth) == 12
        assert chart.net_worth[0].month == "2025-04-01T00:00:00+00:00"
        assert chart.net_worth[-1].month == "2026-03-01T00:00:00+00:00"
        assert len(chart.cash_flow) == 6
        assert chart.cash_flow[0].month == "2025-10-01T00:00:00+00:00"

    def test_net_worth_trends_upward(self, rng):
        _, chart = generate_initial_data(now=datetime(2026, 3, 15), rng=rng)

        for index, point in enumerate(chart.net_worth):
            base = 50000 + index * 3000
            assert base <= point.net_worth < base + 2000

    def test_cash_flow_near_base(self, rng):
        _, chart = generate_initial_data(rng=rng)

        for point in chart.cash_flow:
            assert 4950 <= point.income <= 5450
            assert 3500 <= point.expenses <= 3900

    def test_fixed_breakdowns(self, rng):
        _, chart = generate_initial_data(rng=rng)

        assert [(p.category, p.amount) for p in chart.expense_breakdown] == EXPENSE_BREAKDOWN
        assert len(chart.account_distribution) == len(ACCOUNT_DISTRIBUTION)
        assert chart.account_distribution[2].investments == 45000


@pytest.mark.unit
class TestSimulateUpdate:
    def test_metrics_move_at_most_two_percent(self, rng):
        metrics, chart = generate_initial_data(rng=rng)

        updated, _ = simulate_update(metrics, chart, rng)

        for field in ("net_worth", "monthly_income", "monthly_expenses"):
            before = getattr(metrics, field)
            assert abs(getattr(updated, field) - before) <= before * MAX_VARIATION

    def test_change_percents_nudged(self, rng):
        metrics, chart = generate_initial_data(rng=rng)

        updated, _ = simulate_update(metrics, chart, rng)

        assert abs(updated.net_worth_change_percent - 8.5) <= 0.25
        assert abs(updated.income_change_percent - 3.2) <= 0.15

    def test_only_latest_points_change(self, rng):
        metrics, chart = generate_initial_data(rng=rng)

        _, updated = simulate_update(metrics, chart, rng)

        assert updated.net_worth[:-1] == chart.net_worth[:-1]
        assert updated.cash_flow[:-1] == chart.cash_flow[:-1]
        assert updated.net_worth[-1].month == chart.net_worth[-1].month
        assert updated.net_worth[-1].net_worth != chart.net_worth[-1].net_worth
        assert updated.expense_breakdown == chart.expense_breakdown
        assert updated.account_distribution == chart.account_distribution

    def test_input_not_mutated(self, rng):
        metrics, chart = generate_initial_data(rng=rng)
        last = chart.net_worth[-1].net_worth

        simulate_update(metrics, chart, rng)

        assert chart.net_worth[-1].net_worth == last
        assert metrics.net_worth == 65000


@pytest.mark.unit
class TestRealtimeDashboard:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError, match="update_interval must be positive"):
            RealtimeDashboard(update_interval=0)

    def test_initial_snapshot(self, rng):
        dashboard = RealtimeDashboard(rng=rng)
        snapshot = dashboard.snapshot()

        assert snapshot.is_loading is True
        assert snapshot.is_live is False
        assert snapshot.last_update is None
        assert snapshot.metrics.net_worth == 65000

    def test_perform_update_notifies_listeners(self, rng):
        dashboard = RealtimeDashboard(rng=rng)
        seen = []
        dashboard.subscribe(seen.append)

        dashboard.perform_update()

        assert len(seen) == 1
        assert seen[0].is_live is True
        assert seen[0].last_update is not None

    def test_unsubscribe(self, rng):
        dashboard = RealtimeDashboard(rng=rng)
        seen = []
        unsubscribe = dashboard.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        dashboard.perform_update()

        assert seen == []

    def test_live_flag_stays_raised_without_event_loop(self, rng):
        dashboard = RealtimeDashboard(live_duration=0.01, rng=rng)

        dashboard.perform_update()

        assert dashboard.is_live is True
        assert dashboard._live_reset is None

    @pytest.mark.asyncio
    async def test_updates_on_interval(self, rng):
        dashboard = RealtimeDashboard(
            update_interval=0.05, load_delay=0.01, live_duration=0.02, rng=rng
        )
        seen = []
        dashboard.subscribe(seen.append)

        async with dashboard:
            await asyncio.sleep(0.3)
            assert dashboard.is_loading is False

        assert len(seen) >= 2
        assert dashboard._task is None

    @pytest.mark.asyncio
    async def test_live_flag_resets(self, rng):
        dashboard = RealtimeDashboard(live_duration=0.02, rng=rng)

        dashboard.perform_update()
        assert dashboard.is_live is True

        await asyncio.sleep(0.1)
        assert dashboard.is_live is False

    @pytest.mark.asyncio
    async def test_disabled_only_finishes_loading(self, rng):
        dashboard = RealtimeDashboard(
            update_interval=0.01, enabled=False, load_delay=0.01, rng=rng
        )
        seen = []
        dashboard.subscribe(seen.append)

        await dashboard.start()

        assert dashboard.is_loading is False
        assert dashboard.last_update is not None
        assert seen == []

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_live_reset(self, rng):
        dashboard = RealtimeDashboard(live_duration=10, rng=rng)
        dashboard.start()
        dashboard.perform_update()

        await dashboard.stop()

        assert dashboard._live_reset is None
        assert dashboard.is_live is True
