import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Attribution runs
# ---------------------------------------------------------------------------


class AttributionRequest(BaseModel):
    # Presence is checked by the engine so a missing tenant surfaces as {"error": ...}
    organization_id: str | None = None
    days_back: int | None = Field(default=None, ge=0)

    @field_validator("days_back", mode="before")
    @classmethod
    def _strict_days_back(cls, value: Any) -> Any:
        # JSON numbers only; lax mode would turn true into 1 and "7" into 7
        if isinstance(value, (bool, str)):
            raise ValueError("days_back must be a non-negative integer")
        return value


class AttributionResponse(BaseModel):
    success: bool
    message: str
    attributed: int
    orders_processed: int | None = None


class AttributionRunOut(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    days_back: int
    window_start: date
    window_end: date
    conversions_count: int
    orders_processed: int
    product_metrics_json: dict[str, Any]
    created_at: datetime

    class Config:
        from_attributes = True


class ProductROIOut(BaseModel):
    product_id: uuid.UUID
    sku: str
    product_name: str
    cost_price: float | None = None
    selling_price: float | None = None
    total_attributed_revenue: float
    total_attributed_spend: float
    total_attributed_units: int
    attributed_orders: int
    roas: float
    cost_per_acquisition: float
    platforms: list[str]

    class Config:
        from_attributes = True


class ROISummaryOut(BaseModel):
    total_revenue: float
    total_spend: float
    total_orders: int
    average_roas: float
    best_product: ProductROIOut | None = None
    worst_product: ProductROIOut | None = None
    profitable_products: int
    unprofitable_products: int

    class Config:
        from_attributes = True


class ProductROIResponse(BaseModel):
    products: list[ProductROIOut]
    summary: ROISummaryOut

    class Config:
        from_attributes = True


# ---------------------------------------------------------------------------
# Campaign links
# ---------------------------------------------------------------------------


def _check_date_range(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValueError("end_date must not be before start_date")


class CampaignLinkCreate(BaseModel):
    organization_id: uuid.UUID
    user_id: uuid.UUID
    campaign_id: str = Field(min_length=1)
    campaign_name: str | None = None
    platform: str = Field(min_length=1)
    product_id: uuid.UUID | None = None
    sku: str = Field(min_length=1)
    link_type: str = "manual"
    is_active: bool = True
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class CampaignLinkUpdate(BaseModel):
    campaign_id: str | None = Field(default=None, min_length=1)
    campaign_name: str | None = None
    platform: str | None = Field(default=None, min_length=1)
    product_id: uuid.UUID | None = None
    sku: str | None = Field(default=None, min_length=1)
    link_type: str | None = None
    is_active: bool | None = None
    start_date: date | None = None
    end_date: date | None = None


class CampaignLinkOut(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID | None = None
    user_id: uuid.UUID
    campaign_id: str
    campaign_name: str | None = None
    platform: str
    product_id: uuid.UUID | None = None
    sku: str
    link_type: str
    is_active: bool
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class AvailableCampaignOut(BaseModel):
    campaign_id: str
    campaign_name: str
    platform: str
