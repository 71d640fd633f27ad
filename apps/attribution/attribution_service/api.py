"""FastAPI router for attribution runs and the ROI read model."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from attribution_service.db import get_db
from attribution_service.models import AttributionRun
from attribution_service.schemas import (
    AttributionRequest,
    AttributionResponse,
    AttributionRunOut,
    ProductROIResponse,
)
from attribution_service.services.attribution import AttributionEngine, compute_product_roi

router = APIRouter(tags=["attribution"])


@router.post(
    "/attribute-conversions",
    response_model=AttributionResponse,
    response_model_exclude_none=True,
)
def attribute_conversions(payload: AttributionRequest, db: Session = Depends(get_db)):
    """Run attribution for one organization over the trailing window."""
    engine = AttributionEngine()
    result = engine.run(db, payload.organization_id, days_back=payload.days_back)
    return result.to_payload()


@router.options("/attribute-conversions", include_in_schema=False)
def attribute_conversions_options():
    return Response(status_code=200)


@router.get("/api/attribution/runs", response_model=list[AttributionRunOut])
def list_runs(organization_id: uuid.UUID, db: Session = Depends(get_db)):
    runs = (
        db.execute(
            select(AttributionRun)
            .where(AttributionRun.organization_id == organization_id)
            .order_by(AttributionRun.created_at.desc())
        )
        .scalars()
        .all()
    )
    return runs


@router.get("/api/attribution/product-roi", response_model=ProductROIResponse)
def product_roi(
    organization_id: uuid.UUID,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
):
    """Per-product ROI computed from stored conversions."""
    if date_from is not None and date_to is not None and date_to < date_from:
        raise HTTPException(status_code=422, detail="date_to must not be before date_from")

    report = compute_product_roi(db, organization_id, date_from=date_from, date_to=date_to)
    return ProductROIResponse.model_validate(report, from_attributes=True)
