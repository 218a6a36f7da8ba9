"""
Aggregation of windowed sales into per-product, per-day and per-weekday
tallies. Every mapping here is ordered by first appearance so that
tie-breaks downstream are deterministic.
"""

from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from pos_insights.insight_models import (
    AggregateSnapshot,
    BusiestDay,
    DashboardStats,
    Period,
    ProductRecord,
    ProductTally,
    SaleRecord,
    WeekdayDetail,
)
from pos_insights.windows import to_local, trailing_week

DEFAULT_WEEKDAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
TOP_PRODUCTS_LIMIT = 5
CHART_DAYS = 7


def weekday_index(ts: datetime) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (ts.weekday() + 1) % 7


def aggregate(window_sales: Sequence[SaleRecord], now: datetime) -> AggregateSnapshot:
    """Builds per-product and per-day tallies for an already windowed collection."""
    product_tallies: "OrderedDict[str, ProductTally]" = OrderedDict()
    daily_revenue: OrderedDict = OrderedDict()
    daily_count: OrderedDict = OrderedDict()
    revenue = 0

    for sale in window_sales:
        tally = product_tallies.get(sale.product_id)
        if tally is None:
            tally = ProductTally(key=sale.product_id, name=sale.product_name)
            product_tallies[sale.product_id] = tally
        tally.count += 1
        tally.revenue += sale.price

        day = to_local(sale.timestamp, now).date()
        daily_revenue[day] = daily_revenue.get(day, 0) + sale.price
        daily_count[day] = daily_count.get(day, 0) + 1
        revenue += sale.price

    return AggregateSnapshot(
        product_tallies=product_tallies,
        daily_revenue=daily_revenue,
        daily_count=daily_count,
        sale_count=len(window_sales),
        revenue=revenue,
    )


def revenue_by_date(snapshot: AggregateSnapshot, last: int = CHART_DAYS) -> List[tuple]:
    """Chronological (date, revenue) pairs, keeping only the last `last` dates."""
    ordered = sorted(snapshot.daily_revenue.items(), key=lambda item: item[0])
    return ordered[-last:] if last else ordered


def _tally_by_name(sales: Iterable[SaleRecord]) -> List[ProductTally]:
    by_name: "OrderedDict[str, ProductTally]" = OrderedDict()
    for sale in sales:
        tally = by_name.get(sale.product_name)
        if tally is None:
            tally = ProductTally(key=sale.product_name, name=sale.product_name)
            by_name[sale.product_name] = tally
        tally.count += 1
        tally.revenue += sale.price
    # sorted() is stable: equal revenue keeps first-seen order
    return sorted(by_name.values(), key=lambda t: t.revenue, reverse=True)


def weekday_counts(sales: Iterable[SaleRecord], now: datetime) -> List[int]:
    """Sale counts per weekday (Sun..Sat) over the trailing rolling week."""
    counts = [0] * 7
    for sale in trailing_week(sales, now):
        counts[weekday_index(to_local(sale.timestamp, now))] += 1
    return counts


def busiest_day(counts: Sequence[int], weekdays: Sequence[str] = DEFAULT_WEEKDAYS) -> Optional[BusiestDay]:
    """Weekday with the highest count; ties go to the earliest weekday from Sunday."""
    best_index = None
    for index, count in enumerate(counts):
        if count <= 0:
            continue
        if best_index is None or count > counts[best_index]:
            best_index = index
    if best_index is None:
        return None
    return BusiestDay(weekday=weekdays[best_index], weekday_index=best_index, count=counts[best_index])


def weekday_detail(sales: Iterable[SaleRecord], now: datetime, busiest: BusiestDay) -> WeekdayDetail:
    """Product breakdown of the busiest weekday inside the trailing week."""
    day_sales = [
        s for s in trailing_week(sales, now)
        if weekday_index(to_local(s.timestamp, now)) == busiest.weekday_index
    ]
    return WeekdayDetail(
        weekday=busiest.weekday,
        weekday_index=busiest.weekday_index,
        total_transactions=len(day_sales),
        total_revenue=sum(s.price for s in day_sales),
        products=_tally_by_name(day_sales),
    )


def stock_status(stock: int) -> str:
    if stock == 0:
        return "out"
    if stock <= 5:
        return "low"
    if stock <= 20:
        return "normal"
    return "plenty"


def dashboard_stats(
    window_sales: Sequence[SaleRecord],
    all_sales: Sequence[SaleRecord],
    products: Sequence[ProductRecord],
    now: datetime,
    period: Period,
    weekdays: Sequence[str] = DEFAULT_WEEKDAYS,
) -> DashboardStats:
    """Headline figures for the statistics screen."""
    snapshot = aggregate(window_sales, now)
    transactions = snapshot.sale_count
    status_counts: Dict[str, int] = {"out": 0, "low": 0, "normal": 0, "plenty": 0}
    for product in products:
        status_counts[stock_status(product.stock)] += 1

    return DashboardStats(
        period=period,
        total_revenue=snapshot.revenue,
        total_transactions=transactions,
        average_transaction=snapshot.revenue / transactions if transactions > 0 else 0,
        total_items=sum(s.quantity for s in window_sales),
        top_products=_tally_by_name(window_sales)[:TOP_PRODUCTS_LIMIT],
        revenue_by_date=revenue_by_date(snapshot),
        total_products=len(products),
        stock_status_counts=status_counts,
        total_stock=sum(p.stock for p in products),
        busiest_day=busiest_day(weekday_counts(all_sales, now), weekdays),
    )
