"""
Ad Service — Persistence, ranking and admin listing for sponsored ads.

Serving path: at most MAX_ADS_PER_KEYWORD ads per keyword, highest priority
first, earliest created first on ties.
Admin path: every ad in one total order (keyword, priority desc, created_at, id).
Mutations address ads by id; listing positions are resolved to ids first.
"""

import logging
import math
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fakesearch.models import Ad
from fakesearch.schemas import AdPayload
from fakesearch.exceptions import AdNotFoundError

logger = logging.getLogger(__name__)

MAX_ADS_PER_KEYWORD = 3
DEFAULT_GROUPS_PER_PAGE = 10

LISTING_ORDER = (Ad.keyword.asc(), Ad.priority.desc(), Ad.created_at.asc(), Ad.id.asc())


# ── Queries ───────────────────────────────────────────────────────────

async def find_ads_for_keyword(db: AsyncSession, keyword: str) -> list[Ad]:
    """Top-ranked ads whose keyword matches case-insensitively. Empty list when none match."""
    if not keyword or not keyword.strip():
        raise ValueError("keyword is required to look up ads")
    result = await db.execute(
        select(Ad)
        .where(func.lower(Ad.keyword) == func.lower(keyword.strip()))
        .order_by(Ad.priority.desc(), Ad.created_at.asc(), Ad.id.asc())
        .limit(MAX_ADS_PER_KEYWORD)
    )
    return list(result.scalars().all())


async def list_ads(db: AsyncSession) -> list[Ad]:
    """All ads in listing order; the basis for positional references."""
    result = await db.execute(select(Ad).order_by(*LISTING_ORDER))
    return list(result.scalars().all())


async def get_ad(db: AsyncSession, ad_id: int) -> Ad:
    ad = await db.get(Ad, ad_id)
    if not ad:
        raise AdNotFoundError(f"Ad {ad_id} not found")
    return ad


async def resolve_position(db: AsyncSession, position: int) -> int:
    """Id of the ad at a zero-based position of a fresh listing."""
    result = await db.execute(select(Ad.id).order_by(*LISTING_ORDER))
    ids = list(result.scalars().all())
    if position < 0 or position >= len(ids):
        raise AdNotFoundError(f"No ad at position {position} (listing has {len(ids)})")
    return ids[position]


# ── Mutations ─────────────────────────────────────────────────────────

def _apply_payload(ad: Ad, keyword: str, payload: AdPayload) -> None:
    ad.keyword = keyword
    ad.title = payload.title
    ad.display_url = payload.display_url
    ad.final_url = payload.final_url
    ad.description = payload.description
    ad.description2 = payload.description2
    ad.priority = payload.priority
    ad.utm_source = payload.utm_source
    ad.utm_medium = payload.utm_medium
    ad.utm_campaign = payload.utm_campaign


async def create_ad(db: AsyncSession, keyword: str, payload: AdPayload) -> Ad:
    ad = Ad()
    _apply_payload(ad, keyword, payload)
    db.add(ad)
    await db.flush()
    logger.info(f"Created ad {ad.id} for keyword '{keyword}'")
    return ad


async def update_ad(db: AsyncSession, ad_id: int, keyword: str, payload: AdPayload) -> Ad:
    """Overwrite every mutable field of an existing ad."""
    ad = await get_ad(db, ad_id)
    _apply_payload(ad, keyword, payload)
    await db.flush()
    logger.info(f"Updated ad {ad_id} (keyword '{keyword}')")
    return ad


async def delete_ad(db: AsyncSession, ad_id: int) -> None:
    ad = await get_ad(db, ad_id)
    await db.delete(ad)
    await db.flush()
    logger.info(f"Deleted ad {ad_id}")


async def update_ad_at(db: AsyncSession, position: int, keyword: str, payload: AdPayload) -> Ad:
    ad_id = await resolve_position(db, position)
    return await update_ad(db, ad_id, keyword, payload)


async def delete_ad_at(db: AsyncSession, position: int) -> None:
    ad_id = await resolve_position(db, position)
    await delete_ad(db, ad_id)


# ── Admin grouping / pagination ───────────────────────────────────────

def group_by_keyword(ads: list[Ad], filter_text: str = "") -> list[tuple[str, list[Ad]]]:
    """
    Group ads by keyword, keeping listing order within and across groups.
    filter_text keeps ads whose keyword or title contains it (case-insensitive).
    """
    needle = (filter_text or "").strip().lower()
    groups: dict[str, list[Ad]] = {}
    for ad in ads:
        if needle and needle not in ad.keyword.lower() and needle not in ad.title.lower():
            continue
        groups.setdefault(ad.keyword, []).append(ad)
    return list(groups.items())


def paginate_groups(
    groups: list[tuple[str, list[Ad]]],
    page: int = 1,
    per_page: int = DEFAULT_GROUPS_PER_PAGE,
) -> dict:
    """Slice keyword groups (not individual ads) into pages. Pages are 1-based."""
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    total_groups = len(groups)
    total_pages = math.ceil(total_groups / per_page)
    page = max(page, 1)
    start = (page - 1) * per_page
    return {
        "groups": groups[start:start + per_page],
        "total_groups": total_groups,
        "total_pages": total_pages,
        "current_page": page,
        "per_page": per_page,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
