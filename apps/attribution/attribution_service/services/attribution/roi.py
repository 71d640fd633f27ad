"""Per-product ROI read model, recomputed from attributed conversions on demand."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from attribution_service.models import AttributedConversion, Product

UNKNOWN_PLATFORM = "unknown"
UNKNOWN_PRODUCT = "Unknown product"


def _round2(value: float) -> float:
    return round(value, 2)


@dataclass
class ProductROI:
    product_id: uuid.UUID
    sku: str
    product_name: str
    cost_price: float | None = None
    selling_price: float | None = None
    total_attributed_revenue: float = 0.0
    total_attributed_spend: float = 0.0
    total_attributed_units: int = 0
    attributed_orders: int = 0
    roas: float = 0.0
    cost_per_acquisition: float = 0.0
    platforms: list[str] = field(default_factory=list)


@dataclass
class ROISummary:
    total_revenue: float = 0.0
    total_spend: float = 0.0
    total_orders: int = 0
    average_roas: float = 0.0
    best_product: ProductROI | None = None
    worst_product: ProductROI | None = None
    profitable_products: int = 0
    unprofitable_products: int = 0


@dataclass
class ROIReport:
    products: list[ProductROI]
    summary: ROISummary


def compute_product_roi(
    db: Session,
    organization_id: uuid.UUID,
    date_from: date | None = None,
    date_to: date | None = None,
) -> ROIReport:
    query = (
        select(AttributedConversion, Product)
        .join(Product, Product.id == AttributedConversion.product_id)
        .where(AttributedConversion.organization_id == organization_id)
        .order_by(AttributedConversion.conversion_date)
    )
    if date_from is not None:
        query = query.where(AttributedConversion.conversion_date >= date_from)
    if date_to is not None:
        query = query.where(AttributedConversion.conversion_date <= date_to)

    by_product: dict[uuid.UUID, ProductROI] = {}
    for conversion, product in db.execute(query).all():
        entry = by_product.get(product.id)
        if entry is None:
            entry = ProductROI(
                product_id=product.id,
                sku=conversion.sku,
                product_name=product.name or UNKNOWN_PRODUCT,
                cost_price=float(product.cost_price) if product.cost_price is not None else None,
                selling_price=(
                    float(product.selling_price) if product.selling_price is not None else None
                ),
            )
            by_product[product.id] = entry

        entry.total_attributed_revenue += float(conversion.order_value or 0)
        entry.total_attributed_spend += float(conversion.attributed_spend or 0)
        entry.total_attributed_units += int(conversion.quantity or 0)
        entry.attributed_orders += 1
        platform = conversion.platform or UNKNOWN_PLATFORM
        if platform not in entry.platforms:
            entry.platforms.append(platform)

    for entry in by_product.values():
        if entry.total_attributed_spend > 0:
            entry.roas = _round2(entry.total_attributed_revenue / entry.total_attributed_spend)
        if entry.total_attributed_units > 0:
            entry.cost_per_acquisition = _round2(
                entry.total_attributed_spend / entry.total_attributed_units
            )

    products = sorted(by_product.values(), key=lambda p: p.roas, reverse=True)
    return ROIReport(products=products, summary=summarize(products))


def summarize(products: list[ProductROI]) -> ROISummary:
    summary = ROISummary(
        total_revenue=sum(p.total_attributed_revenue for p in products),
        total_spend=sum(p.total_attributed_spend for p in products),
        total_orders=sum(p.attributed_orders for p in products),
        best_product=products[0] if products else None,
        worst_product=products[-1] if products else None,
        profitable_products=sum(1 for p in products if p.roas >= 1),
        unprofitable_products=sum(1 for p in products if 0 < p.roas < 1),
    )
    if summary.total_spend > 0:
        summary.average_roas = _round2(summary.total_revenue / summary.total_spend)
    return summary
