"""
Tests for ad persistence, ranking, listing order and positional/id mutations.
"""

from datetime import datetime, timedelta
from types import SimpleNamespace
import pytest
from fakesearch.exceptions import AdNotFoundError
from fakesearch.models import Ad
from fakesearch.schemas import AdPayload
from fakesearch.services import ad_service

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


def _payload(title="Ad", **overrides) -> AdPayload:
    data = {
        "title": title,
        "displayUrl": "www.example.com",
        "finalUrl": "https://www.example.com/landing",
        "description": "Great deals every day.",
    }
    data.update(overrides)
    return AdPayload.model_validate(data)


async def _insert(db, keyword, title, priority, minutes):
    ad = Ad(
        keyword=keyword,
        title=title,
        display_url="www.example.com",
        final_url="https://www.example.com",
        description="desc",
        priority=priority,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(ad)
    await db.flush()
    return ad


@pytest.mark.anyio
async def test_top_three_by_priority_then_earliest_created(db):
    # Inserted out of creation order so ids do not match created_at order
    await _insert(db, "loans", "late-low", 1, minutes=10)
    await _insert(db, "loans", "early-low", 1, minutes=1)
    await _insert(db, "loans", "mid", 2, minutes=5)
    await _insert(db, "loans", "top", 3, minutes=7)

    ads = await ad_service.find_ads_for_keyword(db, "loans")

    assert [a.title for a in ads] == ["top", "mid", "early-low"]
    assert [a.priority for a in ads] == [3, 2, 1]


@pytest.mark.anyio
async def test_keyword_match_is_case_insensitive_and_exact(db):
    await _insert(db, "Home Loans", "match", 1, minutes=0)
    await _insert(db, "home loans calculator", "other", 1, minutes=1)

    ads = await ad_service.find_ads_for_keyword(db, "HOME LOANS")

    assert [a.title for a in ads] == ["match"]


@pytest.mark.anyio
async def test_non_ascii_keyword_matches_exactly_stored_text(db):
    await _insert(db, "ÉTÉ", "upper", 2, minutes=0)
    await _insert(db, "Crème Brûlée", "dessert", 1, minutes=1)

    assert [a.title for a in await ad_service.find_ads_for_keyword(db, "ÉTÉ")] == ["upper"]
    assert [a.title for a in await ad_service.find_ads_for_keyword(db, "  crème brûlée ")] == ["dessert"]


@pytest.mark.anyio
async def test_no_matches_returns_empty_list(db):
    await _insert(db, "loans", "a", 1, minutes=0)
    assert await ad_service.find_ads_for_keyword(db, "shoes") == []


@pytest.mark.anyio
async def test_lookup_requires_keyword(db):
    with pytest.raises(ValueError):
        await ad_service.find_ads_for_keyword(db, "  ")


@pytest.mark.anyio
async def test_listing_order_is_total(db):
    await _insert(db, "zebra", "z", 1, minutes=0)
    await _insert(db, "apple", "a-low", 1, minutes=0)
    await _insert(db, "apple", "a-high", 5, minutes=3)
    await _insert(db, "apple", "a-low-later", 1, minutes=2)

    ads = await ad_service.list_ads(db)

    assert [a.title for a in ads] == ["a-high", "a-low", "a-low-later", "z"]


@pytest.mark.anyio
async def test_create_applies_defaults(db):
    ad = await ad_service.create_ad(db, "loans", _payload())

    assert ad.id is not None
    assert ad.priority == 1
    assert ad.utm_source == "google"
    assert ad.utm_medium == "paid_search"
    assert ad.utm_campaign is None
    assert ad.created_at is not None


@pytest.mark.anyio
async def test_update_at_position_targets_row_from_fresh_listing(db):
    for i, kw in enumerate(["a", "b", "c", "d", "e"]):
        await _insert(db, kw, f"title-{kw}", 1, minutes=i)
    listing = await ad_service.list_ads(db)
    expected_id = listing[2].id

    updated = await ad_service.update_ad_at(db, 2, "c", _payload(title="Edited", priority=3, utmCampaign="q1"))

    assert updated.id == expected_id
    refreshed = {a.id: a for a in await ad_service.list_ads(db)}
    assert refreshed[expected_id].title == "Edited"
    assert refreshed[expected_id].priority == 3
    assert refreshed[expected_id].utm_campaign == "q1"
    assert sum(1 for a in refreshed.values() if a.title == "Edited") == 1


@pytest.mark.anyio
async def test_delete_at_position(db):
    for i, kw in enumerate(["a", "b", "c"]):
        await _insert(db, kw, f"title-{kw}", 1, minutes=i)

    await ad_service.delete_ad_at(db, 1)

    assert [a.keyword for a in await ad_service.list_ads(db)] == ["a", "c"]


@pytest.mark.anyio
@pytest.mark.parametrize("position", [-1, 3, 99])
async def test_out_of_range_position_is_not_found(db, position):
    for i, kw in enumerate(["a", "b", "c"]):
        await _insert(db, kw, kw, 1, minutes=i)

    with pytest.raises(AdNotFoundError):
        await ad_service.update_ad_at(db, position, "a", _payload())
    with pytest.raises(AdNotFoundError):
        await ad_service.delete_ad_at(db, position)
    assert len(await ad_service.list_ads(db)) == 3


@pytest.mark.anyio
async def test_update_and_delete_by_id(db):
    ad = await _insert(db, "loans", "old", 1, minutes=0)

    await ad_service.update_ad(db, ad.id, "mortgages", _payload(title="new"))
    fetched = await ad_service.get_ad(db, ad.id)
    assert (fetched.keyword, fetched.title) == ("mortgages", "new")

    await ad_service.delete_ad(db, ad.id)
    with pytest.raises(AdNotFoundError):
        await ad_service.get_ad(db, ad.id)
    with pytest.raises(AdNotFoundError):
        await ad_service.delete_ad(db, ad.id)


# ── Grouping / pagination ─────────────────────────────────────────────

def _row(keyword, title):
    return SimpleNamespace(keyword=keyword, title=title)


def test_group_by_keyword_keeps_listing_order():
    rows = [_row("apple", "a1"), _row("apple", "a2"), _row("kiwi", "k1"), _row("zebra", "z1")]
    groups = ad_service.group_by_keyword(rows)
    assert [k for k, _ in groups] == ["apple", "kiwi", "zebra"]
    assert [r.title for r in groups[0][1]] == ["a1", "a2"]


def test_group_filter_matches_keyword_or_title():
    rows = [_row("apple", "Fresh Fruit"), _row("kiwi", "Green FRUIT"), _row("zebra", "Stripes")]
    groups = ad_service.group_by_keyword(rows, "fruit")
    assert [k for k, _ in groups] == ["apple", "kiwi"]
    assert [k for k, _ in ad_service.group_by_keyword(rows, "ZEB")] == ["zebra"]


def test_paginate_groups_pages_by_group():
    groups = [(f"kw{i}", [_row(f"kw{i}", "t")]) for i in range(5)]

    first = ad_service.paginate_groups(groups, page=1, per_page=2)
    last = ad_service.paginate_groups(groups, page=3, per_page=2)

    assert [k for k, _ in first["groups"]] == ["kw0", "kw1"]
    assert first["total_groups"] == 5
    assert first["total_pages"] == 3
    assert first["has_next_page"] is True and first["has_prev_page"] is False
    assert [k for k, _ in last["groups"]] == ["kw4"]
    assert last["has_next_page"] is False and last["has_prev_page"] is True


def test_paginate_empty_listing():
    page = ad_service.paginate_groups([], page=1, per_page=10)
    assert page["groups"] == []
    assert page["total_pages"] == 0
    assert page["has_next_page"] is False
