"""Attribution engine: spreads campaign ad spend over marketplace orders.

Pipeline (one synchronous batch per tenant):
  1. Window       - [today - days_back, today] in UTC calendar dates
  2. Links        - active campaign↔product links, indexed by SKU
  3. Orders       - orders dated inside the window
  4. Spend        - ad spend per linked campaign summed over the window
  5. Matching     - one conversion per (order line, covering link)
  6. Replace      - drop prior conversions for the window's orders, insert new
  7. Aggregates   - overwrite product spend/revenue/ROAS, record a run snapshot
  8. Commit       - steps 6 and 7 share one transaction
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from attribution_service.models import (
    AdMetric,
    AttributedConversion,
    AttributionRun,
    CampaignProductLink,
    Order,
    Product,
)
from attribution_service.services.attribution.windows import (
    AttributionWindow,
    link_covers,
    parse_organization_id,
    utc_today,
    validate_days_back,
)
from attribution_service.services.exceptions import DataAccessError
from attribution_service.settings import settings

logger = logging.getLogger(__name__)

METHOD_PROPORTIONAL = "proportional"
METHOD_TIME_WINDOW = "time_window"


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _order_day(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass
class AttributionResult:
    """Outcome of a single engine run."""

    message: str
    attributed: int = 0
    orders_processed: int | None = None
    success: bool = True
    run_id: uuid.UUID | None = None
    product_metrics: dict[str, dict[str, float]] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "attributed": self.attributed,
        }
        if self.orders_processed is not None:
            payload["orders_processed"] = self.orders_processed
        return payload


# ---------------------------------------------------------------------------
# AttributionEngine
# ---------------------------------------------------------------------------


class AttributionEngine:
    """Runs the attribution pipeline for one organization."""

    def __init__(self, default_days_back: int | None = None) -> None:
        self.default_days_back = (
            settings.ATTRIBUTION_DEFAULT_DAYS_BACK
            if default_days_back is None
            else default_days_back
        )

    def run(
        self,
        db: Session,
        organization_id: Any,
        days_back: Any = None,
        today: date | None = None,
    ) -> AttributionResult:
        """Execute the full pipeline. Returns :class:`AttributionResult`.

        Raises ``InvalidArgumentError`` for a missing tenant or a bad
        ``days_back`` and ``DataAccessError`` when the store fails; nothing
        is committed in the latter case.
        """
        org_id = parse_organization_id(organization_id)
        days = validate_days_back(days_back, default=self.default_days_back)
        window = AttributionWindow.ending_on(today or utc_today(), days)

        logger.info("Processing attribution for org %s, days_back=%d", org_id, days)
        try:
            return self._run(db, org_id, days, window)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Attribution run failed for org %s", org_id)
            raise DataAccessError(str(exc), details={"organization_id": str(org_id)}) from exc

    def _run(
        self,
        db: Session,
        org_id: uuid.UUID,
        days_back: int,
        window: AttributionWindow,
    ) -> AttributionResult:
        links = (
            db.execute(
                select(CampaignProductLink)
                .where(CampaignProductLink.organization_id == org_id)
                .where(CampaignProductLink.is_active.is_(True))
            )
            .scalars()
            .all()
        )
        if not links:
            logger.info("No active campaign links found for org %s", org_id)
            return AttributionResult(message="No active campaign links to process")

        logger.info("Found %d active campaign links", len(links))

        links_by_sku: dict[str, list[CampaignProductLink]] = defaultdict(list)
        for link in links:
            links_by_sku[link.sku].append(link)

        orders = (
            db.execute(
                select(Order)
                .where(Order.organization_id == org_id)
                .where(Order.order_date >= window.start_at)
                .where(Order.order_date < window.end_before)
                .order_by(Order.order_date)
            )
            .scalars()
            .all()
        )
        if not orders:
            logger.info("No orders found in %s..%s", window.start, window.end)
            return AttributionResult(message="No orders to process in date range")

        logger.info("Found %d orders to process", len(orders))

        campaign_spend = self._campaign_spend(
            db, org_id, {link.campaign_id for link in links}, window
        )
        conversions = self._match(orders, links_by_sku, campaign_spend)
        logger.info("Generated %d conversions to insert", len(conversions))

        order_ids = [order.id for order in orders]
        db.execute(
            delete(AttributedConversion)
            .where(AttributedConversion.organization_id == org_id)
            .where(AttributedConversion.order_id.in_(order_ids))
        )
        db.add_all(conversions)

        product_metrics = self._refresh_products(db, conversions)

        run = AttributionRun(
            organization_id=org_id,
            days_back=days_back,
            window_start=window.start,
            window_end=window.end,
            conversions_count=len(conversions),
            orders_processed=len(orders),
            product_metrics_json=product_metrics,
        )
        db.add(run)
        db.commit()

        return AttributionResult(
            message=f"Attributed {len(conversions)} conversions",
            attributed=len(conversions),
            orders_processed=len(orders),
            run_id=run.id,
            product_metrics=product_metrics,
        )

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _campaign_spend(
        self,
        db: Session,
        org_id: uuid.UUID,
        campaign_ids: set[str],
        window: AttributionWindow,
    ) -> dict[str, float]:
        rows = db.execute(
            select(AdMetric.campaign_id, AdMetric.spend)
            .where(AdMetric.organization_id == org_id)
            .where(AdMetric.campaign_id.in_(sorted(campaign_ids)))
            .where(AdMetric.metric_date >= window.start)
            .where(AdMetric.metric_date <= window.end)
        ).all()

        totals: dict[str, float] = defaultdict(float)
        for campaign_id, spend in rows:
            totals[campaign_id] += _to_float(spend)
        return dict(totals)

    def _match(
        self,
        orders: list[Order],
        links_by_sku: dict[str, list[CampaignProductLink]],
        campaign_spend: dict[str, float],
    ) -> list[AttributedConversion]:
        # Spend is spread over every order in the window, matched or not
        order_count = max(len(orders), 1)
        conversions: list[AttributedConversion] = []

        for order in orders:
            order_day = _order_day(order.order_date)
            items = order.items if isinstance(order.items, list) else []

            for item in items:
                if not isinstance(item, dict):
                    continue
                sku = item.get("sku")
                if not sku:
                    continue

                covering = [
                    link
                    for link in links_by_sku.get(sku, [])
                    if link_covers(link.start_date, link.end_date, order_day)
                ]
                if not covering:
                    continue

                quantity = _to_float(item.get("quantity")) or 1.0
                order_value = _to_float(item.get("price")) * quantity
                weight = 1 / len(covering)
                method = METHOD_PROPORTIONAL if len(covering) > 1 else METHOD_TIME_WINDOW

                for link in covering:
                    total_spend = campaign_spend.get(link.campaign_id, 0.0)
                    attributed_spend = (
                        (total_spend * weight) / order_count if total_spend > 0 else 0.0
                    )
                    conversions.append(
                        AttributedConversion(
                            organization_id=link.organization_id,
                            user_id=link.user_id,
                            order_id=order.id,
                            campaign_id=link.campaign_id,
                            campaign_name=link.campaign_name,
                            platform=link.platform,
                            product_id=link.product_id,
                            sku=sku,
                            attributed_spend=attributed_spend,
                            order_value=order_value,
                            quantity=max(int(quantity), 1),
                            attribution_method=method,
                            attribution_weight=weight,
                            conversion_date=order_day,
                        )
                    )

        return conversions

    def _refresh_products(
        self,
        db: Session,
        conversions: list[AttributedConversion],
    ) -> dict[str, dict[str, float]]:
        """Overwrite product aggregates from this run's conversions only."""
        totals: dict[uuid.UUID, dict[str, float]] = defaultdict(
            lambda: {"spend": 0.0, "revenue": 0.0}
        )
        for conversion in conversions:
            if conversion.product_id is None:
                continue
            bucket = totals[conversion.product_id]
            bucket["spend"] += conversion.attributed_spend
            bucket["revenue"] += conversion.order_value

        snapshot: dict[str, dict[str, float]] = {}
        for product_id, bucket in totals.items():
            roas = bucket["revenue"] / bucket["spend"] if bucket["spend"] > 0 else 0.0
            db.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(
                    total_attributed_spend=bucket["spend"],
                    total_attributed_revenue=bucket["revenue"],
                    attributed_roas=roas,
                )
            )
            snapshot[str(product_id)] = {
                "spend": bucket["spend"],
                "revenue": bucket["revenue"],
                "roas": roas,
            }
        return snapshot
