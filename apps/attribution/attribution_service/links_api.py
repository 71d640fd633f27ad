"""FastAPI router for managing campaign↔product links.

Uses sync endpoints with ``get_db``, matching ``attribution_service/api.py``.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from attribution_service.db import get_db
from attribution_service.models import AdMetric, CampaignProductLink
from attribution_service.schemas import (
    AvailableCampaignOut,
    CampaignLinkCreate,
    CampaignLinkOut,
    CampaignLinkUpdate,
)

links_router = APIRouter(prefix="/api/campaign-links", tags=["campaign-links"])

_REQUIRED_FIELDS = ("campaign_id", "platform", "sku", "link_type", "is_active")


@links_router.get("", response_model=list[CampaignLinkOut])
def list_links(
    organization_id: uuid.UUID,
    product_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
):
    query = (
        select(CampaignProductLink)
        .where(CampaignProductLink.organization_id == organization_id)
        .order_by(CampaignProductLink.created_at.desc())
    )
    if product_id is not None:
        query = query.where(CampaignProductLink.product_id == product_id)
    return db.execute(query).scalars().all()


@links_router.get("/available-campaigns", response_model=list[AvailableCampaignOut])
def list_available_campaigns(organization_id: uuid.UUID, db: Session = Depends(get_db)):
    """Distinct campaigns seen in ad metrics, first occurrence wins."""
    rows = db.execute(
        select(AdMetric.campaign_id, AdMetric.campaign_name, AdMetric.platform)
        .where(AdMetric.organization_id == organization_id)
        .order_by(AdMetric.metric_date.desc())
    ).all()

    campaigns: dict[str, AvailableCampaignOut] = {}
    for campaign_id, campaign_name, platform in rows:
        if campaign_id not in campaigns:
            campaigns[campaign_id] = AvailableCampaignOut(
                campaign_id=campaign_id, campaign_name=campaign_name, platform=platform
            )
    return list(campaigns.values())


@links_router.post("", response_model=CampaignLinkOut, status_code=201)
def create_link(payload: CampaignLinkCreate, db: Session = Depends(get_db)):
    link = CampaignProductLink(**payload.model_dump())
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


@links_router.patch("/{link_id}", response_model=CampaignLinkOut)
def update_link(link_id: uuid.UUID, payload: CampaignLinkUpdate, db: Session = Depends(get_db)):
    link = db.get(CampaignProductLink, link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Campaign link not found")

    updates = payload.model_dump(exclude_unset=True)
    for key in _REQUIRED_FIELDS:
        if key in updates and updates[key] is None:
            raise HTTPException(status_code=422, detail=f"{key} cannot be null")
    start_date = updates.get("start_date", link.start_date)
    end_date = updates.get("end_date", link.end_date)
    if start_date is not None and end_date is not None and end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    for key, value in updates.items():
        setattr(link, key, value)
    db.commit()
    db.refresh(link)
    return link


@links_router.delete("/{link_id}", status_code=204)
def delete_link(link_id: uuid.UUID, db: Session = Depends(get_db)):
    link = db.get(CampaignProductLink, link_id)
    if link is None:
        raise HTTPException(status_code=404, detail="Campaign link not found")
    db.delete(link)
    db.commit()
    return Response(status_code=204)
