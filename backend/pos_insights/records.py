"""
Wire models for sale and product payloads.

Accepts the field names used by the store's document database (camelCase
sales, Indonesian product fields such as `nama`/`stok`) as well as plain
snake_case, and converts them into the engine's frozen records.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from pos_insights.insight_models import ProductRecord, SaleRecord

logger = logging.getLogger(__name__)


class RecordError(ValueError):
    """Raised when a sales or products payload cannot be validated."""


def _coerce_timestamp(value: Any) -> Any:
    # Epoch numbers are milliseconds, as produced by browser clients
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    # Serialized document-store timestamps
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if seconds is not None:
            return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
    return value


def _non_negative(value: Any) -> Any:
    if value < 0:
        raise ValueError("must be greater than or equal to 0")
    return value


def _coerce_id(value: Any) -> Any:
    if value is None:
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SaleIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    product_id: str = Field(validation_alias=AliasChoices("productId", "product_id"))
    product_name: Optional[str] = Field("", validation_alias=AliasChoices("productName", "product_name"))
    unit_price: Union[int, float] = Field(0, validation_alias=AliasChoices("unitPrice", "unit_price"))
    quantity: Optional[int] = 1
    price: Union[int, float]
    payment_method: Optional[str] = Field("", validation_alias=AliasChoices("paymentMethod", "payment_method"))
    timestamp: datetime

    coerce_ids = field_validator("id", "product_id", mode="before")(_coerce_id)
    coerce_timestamp = field_validator("timestamp", mode="before")(_coerce_timestamp)
    check_price = field_validator("price")(_non_negative)

    def to_record(self) -> SaleRecord:
        return SaleRecord(
            id=self.id,
            product_id=self.product_id,
            product_name=self.product_name or "",
            price=self.price,
            timestamp=self.timestamp,
            unit_price=self.unit_price,
            quantity=self.quantity if self.quantity is not None else 1,
            payment_method=self.payment_method or "",
        )


class ProductIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = Field(validation_alias=AliasChoices("name", "nama"))
    category: Optional[str] = Field("General", validation_alias=AliasChoices("category", "kategori"))
    unit_price: Union[int, float] = Field(0, validation_alias=AliasChoices("unitPrice", "unit_price", "harga"))
    stock: int = Field(ge=0, validation_alias=AliasChoices("stock", "stok"))
    batch_size: Optional[int] = Field(None, validation_alias=AliasChoices("batchSize", "batch_size"))
    unit: Optional[str] = Field(None, validation_alias=AliasChoices("unit", "satuan"))

    coerce_ids = field_validator("id", mode="before")(_coerce_id)

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=self.id,
            name=self.name,
            unit_price=self.unit_price,
            stock=self.stock,
            category=self.category or "General",
            batch_size=self.batch_size,
            unit=self.unit,
        )


_SALES_ADAPTER = TypeAdapter(List[SaleIn])
_PRODUCTS_ADAPTER = TypeAdapter(List[ProductIn])


def parse_sales(raw: Any) -> List[SaleRecord]:
    try:
        return [s.to_record() for s in _SALES_ADAPTER.validate_python(raw)]
    except ValidationError as e:
        logger.warning(f"Rejected sales payload: {e.error_count()} validation error(s)")
        raise RecordError(f"Invalid sales data: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e


def parse_products(raw: Any) -> List[ProductRecord]:
    try:
        return [p.to_record() for p in _PRODUCTS_ADAPTER.validate_python(raw)]
    except ValidationError as e:
        logger.warning(f"Rejected products payload: {e.error_count()} validation error(s)")
        raise RecordError(f"Invalid products data: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e
