import os
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from pos_insights.catalog import get_catalog
from pos_insights.config import InsightSettings
from pos_insights.insight_engine import InsightEngine
from pos_insights.insight_models import Period
from pos_insights.records import RecordError, parse_products, parse_sales
from pos_insights.windows import parse_date

# Load environment variables
load_dotenv()

# Logging setup (structured-ish JSON)
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='{"time":"%(asctime)s","level":"%(levelname)s","message":"%(message)s","module":"%(name)s"}',
)
logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]
ALLOWED_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
    "Content-MD5, Content-Type, Date, X-Api-Version"
)

# Insight engine cache keyed by language, thresholds and default period
INSIGHT_ENGINES: Dict[tuple, InsightEngine] = {}

app = FastAPI(title="POS Insights")


class BadRequest(Exception):
    def __init__(self, error: str, message: Optional[str] = None):
        super().__init__(message or error)
        self.error = error
        self.message = message


# --- Helper Functions ---
def get_settings() -> InsightSettings:
    return InsightSettings()


def get_insight_engine(settings: InsightSettings) -> InsightEngine:
    """Returns cached insight engine for the given settings."""
    # Unknown languages share the fallback catalog's engine
    language = get_catalog(settings.language).language
    key = (language, settings.thresholds, settings.default_period)
    if key not in INSIGHT_ENGINES:
        INSIGHT_ENGINES[key] = InsightEngine(settings.with_language(language))
    return INSIGHT_ENGINES[key]


def request_settings(settings: InsightSettings, body: Dict[str, Any]) -> InsightSettings:
    """Applies the optional per-request language."""
    language = body.get("language")
    if language is not None and not isinstance(language, str):
        raise BadRequest("Invalid language", f"Expected a language code string, got {type(language).__name__}")
    return settings.with_language(language)


def window_args(body: Dict[str, Any]) -> Dict[str, Any]:
    """Period and custom range from the request body."""
    period = body.get("period")
    if period is not None:
        try:
            period = Period.parse(period)
        except ValueError as e:
            raise BadRequest("Invalid period", str(e))
    try:
        start_date = parse_date(body.get("startDate"))
        end_date = parse_date(body.get("endDate"))
    except (TypeError, ValueError) as e:
        raise BadRequest("Invalid date range", str(e))
    return {"period": period, "start_date": start_date, "end_date": end_date}


def store_now(settings: InsightSettings) -> datetime:
    """Reference instant for a request, in the store's timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


def cors_headers(settings: InsightSettings) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Methods": ",".join(ALL_METHODS),
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }


def json_response(settings: InsightSettings, status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=cors_headers(settings))


async def read_snapshot(request: Request):
    """Parses {sales, products} from the body or raises BadRequest."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        body = {}

    raw_sales = body.get("sales")
    raw_products = body.get("products")
    if raw_sales is None or raw_products is None:
        raise BadRequest("Sales and products data required")

    try:
        sales = parse_sales(raw_sales)
        products = parse_products(raw_products)
    except RecordError as e:
        raise BadRequest("Invalid sales or products data", str(e))
    return body, sales, products


def _gate(request: Request, settings: InsightSettings) -> Optional[Response]:
    """Preflight and method check shared by the /api endpoints."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=cors_headers(settings))
    if request.method != "POST":
        return json_response(settings, 405, {"error": "Method not allowed"})
    return None


# --- API Endpoints ---
@app.api_route("/api/analytics", methods=ALL_METHODS)
async def analytics(request: Request):
    """Computes prioritized insights from a sales/products snapshot."""
    settings = get_settings()
    gated = _gate(request, settings)
    if gated is not None:
        return gated

    try:
        body, sales, products = await read_snapshot(request)
        settings = request_settings(settings, body)
        window = window_args(body)
        engine = get_insight_engine(settings)
        insights = engine.run_all_insights(
            sales,
            products,
            now=store_now(settings),
            **window,
        )
        return json_response(settings, 200, {
            "success": True,
            "insights": [engine.to_dict(i) for i in insights],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
    except BadRequest as e:
        payload = {"error": e.error}
        if e.message:
            payload["message"] = e.message
        return json_response(settings, 400, payload)
    except Exception as e:
        logger.error(f"Analytics error: {e}")
        return json_response(settings, 500, {"error": "Internal server error", "message": str(e)})


@app.api_route("/api/statistics", methods=ALL_METHODS)
async def statistics(request: Request):
    """Dashboard figures plus busiest-weekday suggestions."""
    settings = get_settings()
    gated = _gate(request, settings)
    if gated is not None:
        return gated

    try:
        body, sales, products = await read_snapshot(request)
        settings = request_settings(settings, body)
        window = window_args(body)
        engine = get_insight_engine(settings)
        now = store_now(settings)
        stats = engine.statistics(
            sales,
            products,
            now=now,
            **window,
        )
        return json_response(settings, 200, {
            "success": True,
            "statistics": stats.to_dict(),
            "busiestDay": engine.busiest_day_detail(sales, now),
            "suggestions": [s.to_dict() for s in engine.suggestions(sales, now)],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
    except BadRequest as e:
        payload = {"error": e.error}
        if e.message:
            payload["message"] = e.message
        return json_response(settings, 400, payload)
    except Exception as e:
        logger.error(f"Statistics error: {e}")
        return json_response(settings, 500, {"error": "Internal server error", "message": str(e)})


@app.get("/health")
def health():
    return {"status": "ok"}
