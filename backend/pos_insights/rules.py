"""
Rule evaluators. Each rule looks at the aggregate snapshot and the full
product list and either returns one Insight or None. Rules never raise on
empty or sparse data.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from pos_insights.catalog import MessageCatalog
from pos_insights.config import Thresholds
from pos_insights.formatting import format_currency, round_half_up
from pos_insights.insight_models import (
    AggregateSnapshot,
    Insight,
    InsightType,
    Period,
    Priority,
    ProductRecord,
)


@dataclass(frozen=True)
class RuleContext:
    thresholds: Thresholds
    catalog: MessageCatalog
    period: Period = Period.WEEK

    @property
    def period_label(self) -> str:
        return self.catalog.period_label(self.period)


def best_seller(snapshot: AggregateSnapshot, products: Sequence[ProductRecord], ctx: RuleContext) -> Optional[Insight]:
    """Product with the most sales in the window."""
    winner = None
    for tally in snapshot.product_tallies.values():
        # strict comparison: the first tally reaching the max keeps the title
        if winner is None or tally.count > winner.count:
            winner = tally
    if winner is None or winner.count <= 0:
        return None

    product = next((p for p in products if p.id == winner.key), None)
    name = product.name if product else winner.name

    key = "recommendation_restock" if winner.count > ctx.thresholds.best_seller_restock_count else "recommendation_promote"
    text = ctx.catalog.insight_text
    kind = InsightType.BEST_SELLER.value
    return Insight(
        type=InsightType.BEST_SELLER,
        title=text(kind, "title"),
        message=text(kind, "message", product=name, count=winner.count, period=ctx.period_label),
        recommendation=text(kind, key, product=name),
        priority=Priority.HIGH,
        metadata={
            "productId": winner.key,
            "productName": name,
            "count": winner.count,
            "revenue": winner.revenue,
        },
    )


def out_of_stock(snapshot: AggregateSnapshot, products: Sequence[ProductRecord], ctx: RuleContext) -> Optional[Insight]:
    affected = [p for p in products if p.stock == 0]
    if not affected:
        return None

    kind = InsightType.STOCK_ALERT.value
    return Insight(
        type=InsightType.STOCK_ALERT,
        title=ctx.catalog.insight_text(kind, "title"),
        message=ctx.catalog.insight_text(kind, "message", count=len(affected)),
        recommendation=ctx.catalog.insight_text(kind, "recommendation"),
        priority=Priority.CRITICAL,
        metadata={"products": [p.name for p in affected]},
    )


def low_stock(snapshot: AggregateSnapshot, products: Sequence[ProductRecord], ctx: RuleContext) -> Optional[Insight]:
    affected = [p for p in products if 0 < p.stock <= ctx.thresholds.low_stock_max]
    if not affected:
        return None

    kind = InsightType.LOW_STOCK.value
    return Insight(
        type=InsightType.LOW_STOCK,
        title=ctx.catalog.insight_text(kind, "title"),
        message=ctx.catalog.insight_text(kind, "message", count=len(affected)),
        recommendation=ctx.catalog.insight_text(kind, "recommendation"),
        priority=Priority.MEDIUM,
        metadata={"products": [{"name": p.name, "stock": p.stock} for p in affected]},
    )


def sales_trend(snapshot: AggregateSnapshot, products: Sequence[ProductRecord], ctx: RuleContext) -> Optional[Insight]:
    average = snapshot.average_daily_sales
    if average <= 0:
        return None

    t = ctx.thresholds
    if average > t.trend_high_daily_sales:
        key, priority = "recommendation_high", Priority.LOW
    elif average > t.trend_mid_daily_sales:
        key, priority = "recommendation_mid", Priority.MEDIUM
    else:
        key, priority = "recommendation_low", Priority.MEDIUM

    kind = InsightType.SALES_TREND.value
    return Insight(
        type=InsightType.SALES_TREND,
        title=ctx.catalog.insight_text(kind, "title"),
        message=ctx.catalog.insight_text(kind, "message", average=round_half_up(average)),
        recommendation=ctx.catalog.insight_text(kind, key),
        priority=priority,
        metadata={"averageDailySales": average, "salesDays": snapshot.sales_days},
    )


def revenue(snapshot: AggregateSnapshot, products: Sequence[ProductRecord], ctx: RuleContext) -> Optional[Insight]:
    if snapshot.revenue <= 0:
        return None

    daily_average = snapshot.daily_average_revenue
    t = ctx.thresholds
    if daily_average > t.revenue_high_daily:
        key = "recommendation_high"
    elif daily_average > t.revenue_mid_daily:
        key = "recommendation_mid"
    else:
        key = "recommendation_low"

    kind = InsightType.REVENUE.value
    return Insight(
        type=InsightType.REVENUE,
        title=ctx.catalog.insight_text(kind, "title"),
        message=ctx.catalog.insight_text(
            kind, "message", period=ctx.period_label, revenue=format_currency(snapshot.revenue)
        ),
        recommendation=ctx.catalog.insight_text(kind, key),
        priority=Priority.MEDIUM,
        metadata={
            "revenue": snapshot.revenue,
            "dailyAverageRevenue": round_half_up(daily_average),
            "salesDays": snapshot.sales_days,
        },
    )


def slow_moving(snapshot: AggregateSnapshot, products: Sequence[ProductRecord], ctx: RuleContext) -> Optional[Insight]:
    t = ctx.thresholds
    affected = [
        p for p in products
        if p.stock > t.slow_moving_min_stock and snapshot.sale_count_for(p.id) < t.slow_moving_max_sales
    ]
    if not affected:
        return None

    kind = InsightType.SLOW_MOVING.value
    return Insight(
        type=InsightType.SLOW_MOVING,
        title=ctx.catalog.insight_text(kind, "title"),
        message=ctx.catalog.insight_text(kind, "message", count=len(affected)),
        recommendation=ctx.catalog.insight_text(kind, "recommendation"),
        priority=Priority.LOW,
        metadata={"products": [{"name": p.name, "stock": p.stock} for p in affected]},
    )


Rule = Callable[[AggregateSnapshot, Sequence[ProductRecord], RuleContext], Optional[Insight]]

# Evaluation order; equal-priority insights keep this order after sorting
RULES: List[Rule] = [
    best_seller,
    out_of_stock,
    low_stock,
    sales_trend,
    revenue,
    slow_moving,
]
