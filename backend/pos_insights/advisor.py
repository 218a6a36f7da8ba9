"""
Weekday-pattern advisor: qualitative suggestions for the busiest weekday.
"""

import logging
from typing import List, Optional

from pos_insights.catalog import MessageCatalog
from pos_insights.config import Thresholds
from pos_insights.formatting import format_currency
from pos_insights.insight_models import Suggestion, SuggestionKind, WeekdayDetail

logger = logging.getLogger(__name__)

WEEKEND_INDEXES = {0, 6}  # Sunday, Saturday


def _suggest(catalog: MessageCatalog, kind: SuggestionKind, template: str, **values) -> Suggestion:
    return Suggestion(
        kind=kind,
        title=catalog.suggestion_text(template, "title"),
        content=catalog.suggestion_text(template, "content", **values),
    )


def advise(detail: Optional[WeekdayDetail], thresholds: Thresholds, catalog: MessageCatalog) -> List[Suggestion]:
    """
    Suggestions in fixed order: schedule, top product, pricing or volume,
    diversity. A suggestion is skipped only when its precondition fails.
    """
    if detail is None:
        return []

    day = detail.weekday
    suggestions: List[Suggestion] = []

    if detail.weekday_index in WEEKEND_INDEXES:
        suggestions.append(_suggest(catalog, SuggestionKind.SCHEDULE, "schedule_weekend", day=day))
    else:
        suggestions.append(_suggest(catalog, SuggestionKind.SCHEDULE, "schedule_weekday", day=day))

    if detail.products:
        top = detail.products[0]
        suggestions.append(
            _suggest(catalog, SuggestionKind.PRODUCT, "product", product=top.name, day=day, count=top.count)
        )

    average = format_currency(detail.average_transaction)
    if detail.average_transaction > thresholds.premium_transaction_value:
        suggestions.append(_suggest(catalog, SuggestionKind.PRICING, "pricing", average=average))
    else:
        suggestions.append(_suggest(catalog, SuggestionKind.VOLUME, "volume", average=average))

    if len(detail.products) >= thresholds.diversity_min_products:
        suggestions.append(
            _suggest(catalog, SuggestionKind.DIVERSITY, "diversity", count=len(detail.products), day=day)
        )

    logger.debug(f"Advisor produced {len(suggestions)} suggestions for {day}")
    return suggestions
