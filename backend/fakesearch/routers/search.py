"""
Search Router — Organic results for the results page.
"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query
from fakesearch.schemas import SearchResult
from fakesearch.services.search_service import search

router = APIRouter()


@router.get("", response_model=list[SearchResult])
async def get_search_results(
    q: Optional[str] = Query(None, description="Search query"),
    gl: Optional[str] = Query(None, description="Country/region, e.g. us, uk, de"),
    hl: Optional[str] = Query(None, description="Interface language, e.g. en, es"),
    lr: Optional[str] = Query(None, description="Language restriction, e.g. lang_en"),
    location: Optional[str] = Query(None, description="Location for local results"),
):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Query parameter required")
    return await search(q.strip(), gl=gl, hl=hl, lr=lr, location=location)
