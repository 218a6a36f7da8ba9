from datetime import datetime, timedelta, timezone

import pytest

from pos_insights.catalog import get_catalog
from pos_insights.config import InsightSettings, Thresholds
from pos_insights.insight_engine import InsightEngine
from pos_insights.insight_models import Period, ProductRecord, SaleRecord
from pos_insights.rules import RuleContext

# Monday
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_sale():
    counter = {"n": 0}

    def _make(product_id="p1", price=1000, ts=None, name=None, quantity=1, hours_ago=None):
        counter["n"] += 1
        if ts is None:
            ts = NOW - timedelta(hours=hours_ago if hours_ago is not None else 1)
        return SaleRecord(
            id=f"s{counter['n']}",
            product_id=product_id,
            product_name=name or product_id,
            price=price,
            timestamp=ts,
            unit_price=price,
            quantity=quantity,
            payment_method="cash",
        )

    return _make


@pytest.fixture
def make_product():
    def _make(product_id="p1", stock=10, name=None, unit_price=1000, category="General"):
        return ProductRecord(
            id=product_id,
            name=name or product_id,
            unit_price=unit_price,
            stock=stock,
            category=category,
        )

    return _make


@pytest.fixture
def settings():
    return InsightSettings(language="en", default_period="week", thresholds=Thresholds(), timezone="UTC")


@pytest.fixture
def engine(settings):
    return InsightEngine(settings)


@pytest.fixture
def rule_ctx():
    return RuleContext(thresholds=Thresholds(), catalog=get_catalog("en"), period=Period.WEEK)
