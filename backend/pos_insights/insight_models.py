"""
Insight models (dataclasses) shared by the insight engine.
Keeps business structures separate from transport concerns.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Any, Optional


class Priority(str, Enum):
    """Closed, ordered severity of an insight."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.CRITICAL: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class InsightType(str, Enum):
    BEST_SELLER = "best_seller"
    STOCK_ALERT = "stock_alert"
    LOW_STOCK = "low_stock"
    SALES_TREND = "sales_trend"
    REVENUE = "revenue"
    SLOW_MOVING = "slow_moving"


class SuggestionKind(str, Enum):
    """Fixed kinds of advisor suggestions."""
    SCHEDULE = "schedule"
    PRODUCT = "product"
    PRICING = "pricing"
    VOLUME = "volume"
    DIVERSITY = "diversity"


class Period(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "Period":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown period '{value}'. Expected one of: {allowed}")


@dataclass(frozen=True)
class SaleRecord:
    """One sale line as recorded by the cashier."""
    id: str
    product_id: str
    product_name: str
    price: float  # line total
    timestamp: datetime
    unit_price: float = 0.0
    quantity: int = 1
    payment_method: str = ""


@dataclass(frozen=True)
class ProductRecord:
    """A catalog product with its current stock level."""
    id: str
    name: str
    unit_price: float
    stock: int
    category: str = "General"
    batch_size: Optional[int] = None
    unit: Optional[str] = None


@dataclass
class Insight:
    """Represents a generated insight."""
    type: InsightType
    title: str
    message: str
    recommendation: str
    priority: Priority
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "recommendation": self.recommendation,
            "priority": self.priority.value,
        }
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


@dataclass
class Suggestion:
    """Advisory note for the busiest weekday. Carries no priority."""
    kind: SuggestionKind
    title: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "title": self.title, "content": self.content}


@dataclass
class ProductTally:
    key: str
    name: str
    count: int = 0
    revenue: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count, "revenue": self.revenue}


@dataclass
class AggregateSnapshot:
    """Per-invocation summary of a windowed sale collection."""
    product_tallies: "OrderedDict[str, ProductTally]"
    daily_revenue: "OrderedDict[date, float]"
    daily_count: "OrderedDict[date, int]"
    sale_count: int
    revenue: float

    @property
    def sales_days(self) -> int:
        return len(self.daily_count)

    @property
    def average_daily_sales(self) -> float:
        return self.sale_count / self.sales_days if self.sales_days > 0 else 0

    @property
    def daily_average_revenue(self) -> float:
        return self.revenue / self.sales_days if self.sales_days > 0 else 0

    def sale_count_for(self, product_id: str) -> int:
        tally = self.product_tallies.get(product_id)
        return tally.count if tally else 0


@dataclass
class BusiestDay:
    weekday: str
    weekday_index: int  # 0 = Sunday
    count: int


@dataclass
class WeekdayDetail:
    weekday: str
    weekday_index: int
    total_transactions: int
    total_revenue: float
    products: List[ProductTally]

    @property
    def average_transaction(self) -> float:
        if self.total_transactions <= 0:
            return 0
        return self.total_revenue / self.total_transactions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.weekday,
            "totalTransactions": self.total_transactions,
            "totalRevenue": self.total_revenue,
            "products": [p.to_dict() for p in self.products],
        }


@dataclass
class Window:
    period: Period
    start: Optional[datetime]
    end: Optional[datetime]


@dataclass
class DashboardStats:
    """Headline figures for the statistics screen."""
    period: Period
    total_revenue: float
    total_transactions: int
    average_transaction: float
    total_items: int
    top_products: List[ProductTally]
    revenue_by_date: List[tuple]
    total_products: int
    stock_status_counts: Dict[str, int]
    total_stock: int
    busiest_day: Optional[BusiestDay] = None

    def to_dict(self) -> Dict[str, Any]:
        busiest = None
        if self.busiest_day is not None:
            busiest = {"day": self.busiest_day.weekday, "count": self.busiest_day.count}
        return {
            "period": self.period.value,
            "totalRevenue": self.total_revenue,
            "totalTransactions": self.total_transactions,
            "averageTransaction": self.average_transaction,
            "totalItems": self.total_items,
            "topProducts": [p.to_dict() for p in self.top_products],
            "revenueByDate": [{"date": d.isoformat(), "revenue": r} for d, r in self.revenue_by_date],
            "totalProducts": self.total_products,
            "stockStatus": dict(self.stock_status_counts),
            "totalStock": self.total_stock,
            "busiestDay": busiest,
        }
