import json
from datetime import timedelta

from pos_insights.config import InsightSettings, Thresholds
from pos_insights.insight_engine import InsightEngine, generate_insights, sort_by_priority
from pos_insights.insight_models import Insight, InsightType, Priority

RULE_ORDER = [
    InsightType.BEST_SELLER,
    InsightType.STOCK_ALERT,
    InsightType.LOW_STOCK,
    InsightType.SALES_TREND,
    InsightType.REVENUE,
    InsightType.SLOW_MOVING,
]


def _insight(kind, priority):
    return Insight(type=kind, title="", message="", recommendation="", priority=priority)


def test_sort_by_priority_is_stable():
    insights = [
        _insight(InsightType.BEST_SELLER, Priority.HIGH),
        _insight(InsightType.LOW_STOCK, Priority.MEDIUM),
        _insight(InsightType.SALES_TREND, Priority.MEDIUM),
        _insight(InsightType.STOCK_ALERT, Priority.CRITICAL),
        _insight(InsightType.SLOW_MOVING, Priority.LOW),
        _insight(InsightType.REVENUE, Priority.MEDIUM),
    ]

    ordered = [i.type for i in sort_by_priority(insights)]

    assert ordered == [
        InsightType.STOCK_ALERT,
        InsightType.BEST_SELLER,
        InsightType.LOW_STOCK,
        InsightType.SALES_TREND,
        InsightType.REVENUE,
        InsightType.SLOW_MOVING,
    ]


def test_scenario_out_of_stock_without_sales(engine, now, make_product):
    insights = engine.run_all_insights([], [make_product("1", 0, name="Rice")], now)

    assert len(insights) == 1
    alert = insights[0]
    assert alert.type is InsightType.STOCK_ALERT
    assert alert.priority is Priority.CRITICAL
    assert alert.metadata["products"] == ["Rice"]
    assert not any(i.type is InsightType.BEST_SELLER for i in insights)


def test_scenario_ten_sales_of_one_product(engine, now, make_sale, make_product):
    sales = [make_sale("tea", 2000, name="Tea", hours_ago=1) for _ in range(10)]
    products = [make_product("tea", 15, name="Tea")]

    insights = engine.run_all_insights(sales, products, now)
    by_type = {i.type: i for i in insights}

    assert [i.type for i in insights] == [InsightType.BEST_SELLER, InsightType.SALES_TREND, InsightType.REVENUE]
    assert by_type[InsightType.BEST_SELLER].metadata["productName"] == "Tea"
    assert by_type[InsightType.BEST_SELLER].metadata["count"] == 10
    assert by_type[InsightType.REVENUE].metadata["revenue"] == 20000
    assert by_type[InsightType.REVENUE].message == "Revenue this week: Rp 20.000"
    # an average of exactly 10 is not above 10
    trend = by_type[InsightType.SALES_TREND]
    assert trend.priority is Priority.MEDIUM
    assert trend.recommendation == "Sales are stable. Try a promotion strategy to grow them"


def test_scenario_slow_moving_stock(engine, now, make_product):
    insights = engine.run_all_insights([], [make_product("salt", 25, name="Salt")], now)

    assert [i.type for i in insights] == [InsightType.SLOW_MOVING]
    assert insights[0].priority is Priority.LOW


def test_output_is_sorted_and_ties_keep_rule_order(engine, now, make_sale, make_product):
    sales = [make_sale("tea", 2000, hours_ago=h) for h in (1, 2, 30)] + [make_sale("old", 500, ts=now - timedelta(days=9))]
    products = [
        make_product("tea", 3),
        make_product("rice", 0),
        make_product("salt", 40),
    ]

    insights = engine.run_all_insights(sales, products, now)
    ranks = [i.priority.rank for i in insights]

    assert ranks == sorted(ranks, reverse=True)
    for a, b in zip(insights, insights[1:]):
        if a.priority is b.priority:
            assert RULE_ORDER.index(a.type) < RULE_ORDER.index(b.type)
    assert insights[0].type is InsightType.STOCK_ALERT


def test_period_changes_the_window(engine, now, make_sale, make_product):
    sales = [make_sale("tea", 1000, hours_ago=1), make_sale("tea", 1000, ts=now - timedelta(days=10))]

    week = engine.run_all_insights(sales, [], now, period="week")
    month = engine.run_all_insights(sales, [], now, period="month")

    week_revenue = next(i for i in week if i.type is InsightType.REVENUE)
    month_revenue = next(i for i in month if i.type is InsightType.REVENUE)
    assert week_revenue.metadata["revenue"] == 1000
    assert month_revenue.metadata["revenue"] == 2000
    assert month_revenue.message == "Revenue this month: Rp 2.000"


def test_engine_is_idempotent_and_leaves_inputs_untouched(engine, now, make_sale, make_product):
    sales = [make_sale("tea", 2000, hours_ago=h) for h in range(0, 100, 7)]
    products = [make_product("tea", 2), make_product("rice", 0), make_product("salt", 99)]
    sales_before = list(sales)
    products_before = list(products)

    first = json.dumps([engine.to_dict(i) for i in engine.run_all_insights(sales, products, now)], sort_keys=True)
    second = json.dumps([engine.to_dict(i) for i in engine.run_all_insights(sales, products, now)], sort_keys=True)

    assert first == second
    assert sales == sales_before
    assert products == products_before


def test_custom_thresholds_are_respected(now, make_product):
    settings = InsightSettings(language="en", default_period="week", thresholds=Thresholds(low_stock_max=10))
    insights = InsightEngine(settings).run_all_insights([], [make_product("tea", 8)], now)

    assert [i.type for i in insights] == [InsightType.LOW_STOCK]


def test_indonesian_messages(now, make_product):
    settings = InsightSettings(language="id", default_period="week", thresholds=Thresholds())
    insights = generate_insights([], [make_product("1", 0, name="Beras")], now, settings=settings)

    assert insights[0].title == "Stok Habis"
    assert insights[0].message == "1 produk kehabisan stok"


def test_suggestions_use_busiest_weekday(engine, now, make_sale):
    sales = [make_sale("tea", 2000, name="Tea", hours_ago=h) for h in (24, 25, 26)] + [make_sale("rice", 12000, hours_ago=1)]

    suggestions = engine.suggestions(sales, now)

    # three sales on Sunday beat one on Monday
    assert "Sunday" in suggestions[0].content
    assert "Tea" in suggestions[1].content
    assert engine.suggestions([], now) == []


def test_insight_to_dict_shape(engine, now, make_product):
    payload = engine.to_dict(engine.run_all_insights([], [make_product("1", 0, name="Rice")], now)[0])

    assert payload == {
        "type": "stock_alert",
        "title": "Out of Stock",
        "message": "1 products are out of stock",
        "recommendation": "Restock the sold-out products right away to avoid losing sales",
        "priority": "critical",
        "metadata": {"products": ["Rice"]},
    }
