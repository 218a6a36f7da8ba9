"""
Offline insight runner over exported sales/products files.

Usage:
  python scripts/generate_insights.py --sales sales.csv --products products.json --period month
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo

from pos_insights.config import InsightSettings
from pos_insights.insight_engine import InsightEngine
from pos_insights.insight_models import Period
from pos_insights.parsers import SUPPORTED_EXTENSIONS, load_products, load_sales


def _resolve_now(value: str, tz_name: str) -> datetime:
    tz = ZoneInfo(tz_name)
    if not value:
        return datetime.now(tz)
    now = datetime.fromisoformat(value)
    return now.replace(tzinfo=tz) if now.tzinfo is None else now


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate store insights from exported files.")
    parser.add_argument("--sales", required=True, help=f"Sales file ({', '.join(sorted(SUPPORTED_EXTENSIONS))})")
    parser.add_argument("--products", required=True, help="Products file")
    parser.add_argument("--period", default=None, choices=[p.value for p in Period], help="Reporting window")
    parser.add_argument("--start", default=None, help="Custom window start date (YYYY-MM-DD)")
    parser.add_argument("--end", default=None, help="Custom window end date (YYYY-MM-DD)")
    parser.add_argument("--now", default="", help="Reference time (ISO-8601); defaults to the current time")
    parser.add_argument("--language", default=None, help="Message language (en, id)")
    parser.add_argument("--suggestions", action="store_true", help="Include busiest-weekday suggestions")
    parser.add_argument("--output", default="", help="Optional path to write the JSON report")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)

    settings = InsightSettings(language=args.language)
    engine = InsightEngine(settings)
    now = _resolve_now(args.now, settings.timezone)

    try:
        sales = load_sales(args.sales)
        products = load_products(args.products)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    insights = engine.run_all_insights(sales, products, now, args.period, args.start, args.end)
    report = {
        "success": True,
        "insights": [engine.to_dict(i) for i in insights],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if args.suggestions:
        report["suggestions"] = [s.to_dict() for s in engine.suggestions(sales, now)]

    text = json.dumps(report, indent=2, ensure_ascii=False)
    print(text)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"\nWrote report to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
