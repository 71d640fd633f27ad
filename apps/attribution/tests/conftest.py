from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from attribution_service import models  # noqa: F401  -- ensure all models are registered
from attribution_service.db import Base
from attribution_service.models import (
    AdMetric,
    AttributedConversion,
    CampaignProductLink,
    Order,
    Product,
)

ORG_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")
OTHER_ORG_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b2")
USER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c3")


# ---------------------------------------------------------------------------
# Test DB
# ---------------------------------------------------------------------------


def setup_test_db():
    """Create an in-memory SQLite engine and session factory."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)
    return engine, TestingSessionLocal


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def at_noon(day: date) -> datetime:
    return datetime.combine(day, time(12, 0), tzinfo=timezone.utc)


def make_product(db: Session, sku: str = "ABC", **kwargs) -> Product:
    defaults: dict[str, Any] = dict(
        organization_id=ORG_ID, user_id=USER_ID, sku=sku, name=f"Product {sku}"
    )
    defaults.update(kwargs)
    product = Product(**defaults)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_link(
    db: Session,
    campaign_id: str = "C1",
    sku: str = "ABC",
    product: Product | None = None,
    **kwargs,
) -> CampaignProductLink:
    defaults: dict[str, Any] = dict(
        campaign_id=campaign_id,
        campaign_name=f"Campaign {campaign_id}",
        platform="meta",
        product_id=product.id if product is not None else None,
        sku=sku,
        organization_id=ORG_ID,
        user_id=USER_ID,
        is_active=True,
    )
    defaults.update(kwargs)
    link = CampaignProductLink(**defaults)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


def make_order(
    db: Session,
    order_date: datetime,
    items: list[dict[str, Any]],
    **kwargs,
) -> Order:
    defaults: dict[str, Any] = dict(
        organization_id=ORG_ID,
        user_id=USER_ID,
        platform="mercadolivre",
        order_id_channel=f"ML-{uuid.uuid4().hex[:8]}",
        order_date=order_date,
        total_value=sum(float(i.get("price", 0)) * int(i.get("quantity", 1)) for i in items),
        items=items,
    )
    defaults.update(kwargs)
    order = Order(**defaults)
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def make_ad_metric(
    db: Session,
    campaign_id: str,
    metric_date: date,
    spend: float,
    **kwargs,
) -> AdMetric:
    defaults: dict[str, Any] = dict(
        organization_id=ORG_ID,
        user_id=USER_ID,
        platform="meta",
        campaign_id=campaign_id,
        campaign_name=f"Campaign {campaign_id}",
        metric_date=metric_date,
        spend=spend,
    )
    defaults.update(kwargs)
    metric = AdMetric(**defaults)
    db.add(metric)
    db.commit()
    db.refresh(metric)
    return metric


def make_conversion(
    db: Session,
    product: Product,
    conversion_date: date,
    spend: float,
    value: float,
    quantity: int = 1,
    **kwargs,
) -> AttributedConversion:
    defaults: dict[str, Any] = dict(
        organization_id=ORG_ID,
        user_id=USER_ID,
        campaign_id="C1",
        campaign_name="Campaign C1",
        platform="meta",
        product_id=product.id,
        sku=product.sku,
        attributed_spend=spend,
        order_value=value,
        quantity=quantity,
        attribution_method="time_window",
        attribution_weight=1,
        conversion_date=conversion_date,
    )
    defaults.update(kwargs)
    conversion = AttributedConversion(**defaults)
    db.add(conversion)
    db.commit()
    return conversion
