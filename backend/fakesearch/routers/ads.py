"""
Ads Router — Serve sponsored ads for a query and manage them from the admin console.
"""

import logging
from typing import Optional, Union
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from fakesearch.database import get_db
from fakesearch.exceptions import AdNotFoundError, MalformedUrlError
from fakesearch.models import Ad
from fakesearch.schemas import (
    AdView, AdDetail, AdListEntry, AdGroupsPage, KeywordGroup,
    SaveAdRequest, UpdateAdRequest, DeleteAdRequest,
    GenerateAdsRequest, AdCopyResult,
)
from fakesearch.services import ad_service
from fakesearch.services.ad_copy_service import generate_ad_copy
from fakesearch.services.attribution import build_ad_url
from fakesearch.services.click_tracking import decorate_click_url

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ───────────────────────────────────────────────────────────

def _to_entry(ad: Ad) -> AdListEntry:
    return AdListEntry(
        id=ad.id,
        keyword=ad.keyword,
        ad=AdDetail(
            title=ad.title,
            display_url=ad.display_url,
            url=ad.final_url,
            description=ad.description,
            description2=ad.description2,
            priority=ad.priority,
            utm_source=ad.utm_source or "google",
            utm_medium=ad.utm_medium or "paid_search",
            utm_campaign=ad.utm_campaign,
        ),
    )


def _serve(ads: list[Ad], keyword: str, tracking: bool) -> list[AdView]:
    """Build click-through URLs. Ads with an unusable final URL are left out, never served broken."""
    views = []
    for ad in ads:
        try:
            url = build_ad_url(ad, keyword)
        except MalformedUrlError as e:
            logger.error(f"Skipping ad {ad.id} for '{keyword}': {e}")
            continue
        if tracking:
            url = decorate_click_url(url, keyword, position=len(views))
        views.append(AdView(
            title=ad.title,
            display_url=ad.display_url,
            url=url,
            description=ad.description,
            description2=ad.description2,
            utm_source=ad.utm_source,
            utm_medium=ad.utm_medium,
            utm_campaign=ad.utm_campaign,
        ))
    return views


async def _listing(db: AsyncSession) -> list[AdListEntry]:
    return [_to_entry(ad) for ad in await ad_service.list_ads(db)]


# ── Endpoints ─────────────────────────────────────────────────────────

@router.get("", response_model=Union[list[AdView], list[AdListEntry]])
async def get_ads(
    q: Optional[str] = Query(None, description="Search keyword; omit for the full admin listing"),
    tracking: bool = Query(False, description="Add gclid/adpos click identifiers to ad URLs"),
    db: AsyncSession = Depends(get_db),
):
    """Top ads for a keyword, or every ad in listing order when no keyword is given."""
    if q and q.strip():
        ads = await ad_service.find_ads_for_keyword(db, q)
        return _serve(ads, q.strip(), tracking)
    return await _listing(db)


@router.get("/groups", response_model=AdGroupsPage)
async def get_ad_groups(
    page: int = Query(1, ge=1),
    per_page: int = Query(ad_service.DEFAULT_GROUPS_PER_PAGE, ge=1, le=100),
    filter_text: str = Query("", alias="filter", description="Keep ads whose keyword or title contains this text"),
    db: AsyncSession = Depends(get_db),
):
    """Admin listing grouped by keyword, paginated by keyword group."""
    ads = await ad_service.list_ads(db)
    paged = ad_service.paginate_groups(ad_service.group_by_keyword(ads, filter_text), page, per_page)
    paged["groups"] = [
        KeywordGroup(keyword=keyword, ads=[_to_entry(ad) for ad in group])
        for keyword, group in paged["groups"]
    ]
    return AdGroupsPage(**paged)


@router.post("", response_model=list[AdListEntry])
async def save_ad(req: SaveAdRequest, db: AsyncSession = Depends(get_db)):
    """Create an ad (editing = -1) or replace the ad at listing position `editing`."""
    try:
        if req.editing >= 0:
            await ad_service.update_ad_at(db, req.editing, req.keyword, req.ad)
        else:
            await ad_service.create_ad(db, req.keyword, req.ad)
    except AdNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await _listing(db)


@router.delete("", response_model=list[AdListEntry])
async def delete_ad_at_position(req: DeleteAdRequest, db: AsyncSession = Depends(get_db)):
    """Delete the ad at a listing position."""
    try:
        await ad_service.delete_ad_at(db, req.index)
    except AdNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await _listing(db)


@router.put("/{ad_id}", response_model=list[AdListEntry])
async def update_ad(ad_id: int, req: UpdateAdRequest, db: AsyncSession = Depends(get_db)):
    try:
        await ad_service.update_ad(db, ad_id, req.keyword, req.ad)
    except AdNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await _listing(db)


@router.delete("/{ad_id}", response_model=list[AdListEntry])
async def delete_ad(ad_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await ad_service.delete_ad(db, ad_id)
    except AdNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await _listing(db)


@router.post("/generate", response_model=AdCopyResult)
async def generate_ads(req: GenerateAdsRequest):
    """Draft ad creatives with the configured LLM, or templates when it is unavailable."""
    keyword = req.keyword.strip()
    if not keyword or not req.display_url.strip() or not req.landing_url.strip():
        raise HTTPException(status_code=400, detail="Missing required fields")
    return await generate_ad_copy(
        keyword,
        req.display_url.strip(),
        req.landing_url.strip(),
        num_ads=req.num_ads,
        custom_prompt=req.custom_prompt,
    )
