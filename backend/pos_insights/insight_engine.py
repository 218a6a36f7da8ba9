"""
Insight Engine: deterministic, rule-based business insights for a store.

Takes a snapshot of sales and products, windows the sales, aggregates them
once and runs every rule over the aggregate. The result is sorted by
priority. The engine holds no state between calls and never reads the
clock: callers pass `now`.
"""

import logging
from datetime import datetime
from typing import Dict, List, Any, Optional, Sequence

from pos_insights.advisor import advise
from pos_insights.aggregator import aggregate, busiest_day, dashboard_stats, weekday_counts, weekday_detail
from pos_insights.catalog import get_catalog
from pos_insights.config import InsightSettings
from pos_insights.insight_models import (
    DashboardStats,
    Insight,
    Period,
    ProductRecord,
    SaleRecord,
    Suggestion,
)
from pos_insights.rules import RULES, RuleContext
from pos_insights.windows import select_window

logger = logging.getLogger(__name__)


def sort_by_priority(insights: Sequence[Insight]) -> List[Insight]:
    """Stable sort, most severe first; ties keep evaluation order."""
    return sorted(insights, key=lambda i: i.priority.rank, reverse=True)


class InsightEngine:
    """Generates business insights from sales and stock snapshots."""

    def __init__(self, settings: Optional[InsightSettings] = None):
        """
        Args:
            settings: InsightSettings; read from the environment when omitted
        """
        self.settings = settings or InsightSettings()
        self.catalog = get_catalog(self.settings.language)

    def _period(self, period) -> Period:
        return Period.parse(period) if period is not None else self.settings.default_period

    def run_all_insights(
        self,
        sales: Sequence[SaleRecord],
        products: Sequence[ProductRecord],
        now: datetime,
        period=None,
        start_date=None,
        end_date=None,
    ) -> List[Insight]:
        """
        Runs all rules over the windowed sales.

        Args:
            sales: sale records (not modified)
            products: product records (not modified)
            now: reference instant for every time window
            period: today/week/month/year/custom; settings default when None

        Returns:
            Insights sorted by priority
        """
        period = self._period(period)
        window_sales = select_window(sales, now, period, start_date, end_date)
        snapshot = aggregate(window_sales, now)
        ctx = RuleContext(thresholds=self.settings.thresholds, catalog=self.catalog, period=period)

        generated = []
        for rule in RULES:
            insight = rule(snapshot, products, ctx)
            if insight is not None:
                logger.debug(f"Rule '{rule.__name__}' triggered with priority '{insight.priority.value}'")
                generated.append(insight)

        logger.info(
            f"Generated {len(generated)} insights from {len(window_sales)}/{len(sales)} sales "
            f"and {len(products)} products (period={period.value})"
        )
        return sort_by_priority(generated)

    def suggestions(self, sales: Sequence[SaleRecord], now: datetime) -> List[Suggestion]:
        """Advisor suggestions for the busiest weekday of the trailing week."""
        busiest = busiest_day(weekday_counts(sales, now), self.catalog.weekdays)
        if busiest is None:
            return []
        detail = weekday_detail(sales, now, busiest)
        return advise(detail, self.settings.thresholds, self.catalog)

    def busiest_day_detail(self, sales: Sequence[SaleRecord], now: datetime) -> Optional[Dict[str, Any]]:
        busiest = busiest_day(weekday_counts(sales, now), self.catalog.weekdays)
        if busiest is None:
            return None
        return weekday_detail(sales, now, busiest).to_dict()

    def statistics(
        self,
        sales: Sequence[SaleRecord],
        products: Sequence[ProductRecord],
        now: datetime,
        period=None,
        start_date=None,
        end_date=None,
    ) -> DashboardStats:
        period = self._period(period)
        window_sales = select_window(sales, now, period, start_date, end_date)
        return dashboard_stats(window_sales, sales, products, now, period, self.catalog.weekdays)

    def to_dict(self, insight: Insight) -> Dict[str, Any]:
        """Converts insight to dictionary."""
        return insight.to_dict()


def generate_insights(
    sales: Sequence[SaleRecord],
    products: Sequence[ProductRecord],
    now: datetime,
    period=None,
    start_date=None,
    end_date=None,
    settings: Optional[InsightSettings] = None,
) -> List[Insight]:
    """Embedded-call shortcut for in-process callers."""
    return InsightEngine(settings).run_all_insights(sales, products, now, period, start_date, end_date)
