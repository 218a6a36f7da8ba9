"""
Message catalogs: per-language templates for insight and suggestion text.

Catalogs live next to this module as <language>.yaml and are loaded once per
process.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

logger = logging.getLogger(__name__)

CATALOG_DIR = Path(__file__).parent / "catalogs"
DEFAULT_LANGUAGE = "en"

_REQUIRED_SECTIONS = ("weekdays", "periods", "insights", "suggestions")

# Loaded catalogs keyed by language code
_CATALOGS: Dict[str, "MessageCatalog"] = {}


class MessageCatalog:
    """Templates for one language."""

    def __init__(self, language: str, data: Dict[str, Any]):
        missing = [s for s in _REQUIRED_SECTIONS if s not in data]
        if missing:
            raise ValueError(f"Catalog '{language}' missing sections: {missing}")
        weekdays = data["weekdays"]
        if not isinstance(weekdays, list) or len(weekdays) != 7:
            raise ValueError(f"Catalog '{language}' must list 7 weekdays starting with Sunday")

        self.language = language
        self.weekdays: List[str] = [str(d) for d in weekdays]
        self.periods: Dict[str, str] = data["periods"]
        self._insights: Dict[str, Dict[str, str]] = data["insights"]
        self._suggestions: Dict[str, Dict[str, str]] = data["suggestions"]

    def period_label(self, period) -> str:
        key = getattr(period, "value", period)
        return self.periods.get(key, key)

    def insight_text(self, insight_type: str, key: str, **values) -> str:
        template = self._insights[insight_type][key]
        return template.format(**values)

    def suggestion_text(self, kind: str, key: str, **values) -> str:
        template = self._suggestions[kind][key]
        return template.format(**values)


def available_languages() -> List[str]:
    return sorted(p.stem for p in CATALOG_DIR.glob("*.yaml"))


def get_catalog(language: Optional[str] = None) -> MessageCatalog:
    """Returns the catalog for a language, falling back to English."""
    language = (language or DEFAULT_LANGUAGE).lower()
    if language in _CATALOGS:
        return _CATALOGS[language]

    if language not in available_languages():
        if language == DEFAULT_LANGUAGE:
            raise ValueError(f"Default catalog not found in {CATALOG_DIR}")
        logger.warning(f"No message catalog for '{language}', using '{DEFAULT_LANGUAGE}'")
        return get_catalog(DEFAULT_LANGUAGE)

    catalog_file = CATALOG_DIR / f"{language}.yaml"

    with open(catalog_file, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    catalog = MessageCatalog(language, data)
    _CATALOGS[language] = catalog
    logger.info(f"Loaded message catalog '{language}'")
    return catalog
