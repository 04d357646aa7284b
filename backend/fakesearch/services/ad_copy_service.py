"""
Ad Copy Service — Draft search ad creatives for a keyword.

Primary path asks the configured LLM for a JSON array of creatives.
Anything that goes wrong there (no key, timeout, HTTP error, bad JSON,
missing fields, too few ads) falls back to fixed templates, and the caller
gets the same result shape either way.
"""

import asyncio
import json
import logging
import re
from datetime import date, datetime, timezone
from typing import Optional
from pydantic import ValidationError
from fakesearch.config import get_settings
from fakesearch.exceptions import InvalidAIResponseError
from fakesearch.schemas import AdCreative, AdCopyResult
from fakesearch.services.ai_service import AIService, create_ai_service

logger = logging.getLogger(__name__)
settings = get_settings()

TITLE_LIMIT = 30
DESCRIPTION_LIMIT = 90
ELLIPSIS = "..."

# Audience angles for ads beyond the first three
EXTRA_FOCUSES = ["local services", "seasonal offers", "mobile users", "social proof", "urgency/limited time"]

FALLBACK_TEMPLATES = [
    {
        "title": "Get Started Today",
        "title2": "Easy & Trusted",
        "description": "Perfect for beginners. Step-by-step {keyword} guidance.",
        "description2": "24/7 support available. Join thousands of satisfied customers.",
        "target_audience": "First-time buyers",
        "campaign_focus": "Beginner Friendly Guide",
    },
    {
        "title": "Compare & Save",
        "title2": "Best Value Online",
        "description": "Compare {keyword} options and get the best deal.",
        "description2": "Price match guarantee. Free consultation available.",
        "target_audience": "Comparison shoppers",
        "campaign_focus": "Value Comparison Deal",
    },
    {
        "title": "Premium Service",
        "title2": "Expert Solutions",
        "description": "Exclusive {keyword} access with premium features.",
        "description2": "Dedicated expert assistance. Priority customer service.",
        "target_audience": "Premium customers",
        "campaign_focus": "Premium Expert Service",
    },
    {
        "title": "Local Experts",
        "title2": "Near You",
        "description": "Find local {keyword} specialists in your area.",
        "description2": "Same-day service available. Licensed professionals only.",
        "target_audience": "Local customers",
        "campaign_focus": "Local Service Area",
    },
    {
        "title": "Limited Time",
        "title2": "Special Offer",
        "description": "Don't miss out on our {keyword} promotion.",
        "description2": "Ends soon! Call now for exclusive pricing.",
        "target_audience": "Urgent shoppers",
        "campaign_focus": "Limited Time Offer",
    },
    {
        "title": "Mobile Friendly",
        "title2": "On-the-Go",
        "description": "Access {keyword} services anywhere, anytime.",
        "description2": "Mobile app available. Works on all devices.",
        "target_audience": "Mobile users",
        "campaign_focus": "Mobile Convenience",
    },
    {
        "title": "Trusted Choice",
        "title2": "5-Star Rated",
        "description": "Join over 10,000 happy {keyword} customers.",
        "description2": "99% satisfaction rate. Read our reviews.",
        "target_audience": "Social proof seekers",
        "campaign_focus": "Social Proof Trust",
    },
    {
        "title": "Free Trial",
        "title2": "No Risk",
        "description": "Try our {keyword} service completely free.",
        "description2": "No credit card required. Cancel anytime.",
        "target_audience": "Trial seekers",
        "campaign_focus": "Free Trial Offer",
    },
]


# ── Limits & naming ───────────────────────────────────────────────────

def _cut_title(text: Optional[str]) -> Optional[str]:
    if text and len(text) > TITLE_LIMIT:
        return text[:TITLE_LIMIT]
    return text


def _cut_description(text: str) -> str:
    if len(text) > DESCRIPTION_LIMIT:
        return text[:DESCRIPTION_LIMIT - len(ELLIPSIS)] + ELLIPSIS
    return text


def enforce_limits(creative: AdCreative) -> AdCreative:
    """Titles hard-cut at 30 chars; descriptions over 90 cut to 87 plus an ellipsis."""
    return creative.model_copy(update={
        "title": _cut_title(creative.title),
        "title2": _cut_title(creative.title2),
        "description": _cut_description(creative.description),
        "description2": _cut_description(creative.description2),
    })


def _slug(text: str) -> str:
    return re.sub(r"\s+", "_", text.strip()).lower()


def campaign_name(campaign_focus: str, keyword: str, today: Optional[date] = None) -> str:
    """e.g. 'value_comparison_deal_home_loans_2025-03-01'."""
    today = today or datetime.now(timezone.utc).date()
    return f"{_slug(campaign_focus)}_{_slug(keyword)}_{today.isoformat()}"


def _result(creatives: list[AdCreative], keyword: str, today: Optional[date]) -> AdCopyResult:
    ads = [enforce_limits(c) for c in creatives]
    return AdCopyResult(
        ads=ads,
        campaign_names=[campaign_name(ad.campaign_focus, keyword, today) for ad in ads],
    )


# ── Fallback path ─────────────────────────────────────────────────────

def fallback_ad_copy(keyword: str, num_ads: int = 3, today: Optional[date] = None) -> AdCopyResult:
    """Deterministic template creatives, cycling through the templates when num_ads exceeds them."""
    creatives = []
    for i in range(num_ads):
        template = FALLBACK_TEMPLATES[i % len(FALLBACK_TEMPLATES)]
        creatives.append(AdCreative(**{k: v.replace("{keyword}", keyword) for k, v in template.items()}))
    return _result(creatives, keyword, today)


# ── Primary path ──────────────────────────────────────────────────────

def build_prompt(
    keyword: str,
    display_url: str,
    landing_url: str,
    num_ads: int = 3,
    custom_prompt: Optional[str] = None,
) -> str:
    """Instruction sent to the LLM. A custom prompt gets its {placeholders} filled in."""
    if custom_prompt:
        return (
            custom_prompt
            .replace("{keyword}", keyword)
            .replace("{displayUrl}", display_url)
            .replace("{landingUrl}", landing_url)
            .replace("{numAds}", str(num_ads))
        )

    extra = "\n".join(
        f"{i + 4}. Additional ad: Focus on "
        f"{EXTRA_FOCUSES[i] if i < len(EXTRA_FOCUSES) else 'unique value proposition'}"
        for i in range(max(num_ads - 3, 0))
    )
    example = json.dumps(
        [{k: v.replace("{keyword}", keyword) for k, v in t.items()} for t in FALLBACK_TEMPLATES[:3]],
        indent=2,
    )
    return f"""Generate {num_ads} different Google Ads for the keyword "{keyword}" with display URL "{display_url}" and landing URL "{landing_url}".

Each ad should target a different audience with distinct messaging:
1. First ad: Target first-time buyers/beginners - emphasize trust, simplicity, guidance
2. Second ad: Target comparison shoppers - emphasize value, features, competitive advantages
3. Third ad: Target premium/established customers - emphasize quality, exclusivity, expertise
{extra}

For each ad, provide:
- title (max {TITLE_LIMIT} chars) - Primary headline
- title2 (max {TITLE_LIMIT} chars) - Secondary headline
- description (max {DESCRIPTION_LIMIT} chars) - First description line
- description2 (max {DESCRIPTION_LIMIT} chars) - Second description line
- target_audience (brief description for internal use)
- campaign_focus (3-4 words describing the campaign angle)

Return ONLY a valid JSON array with exactly {num_ads} ads and no additional text or formatting. Format:
{example}"""


def parse_ai_response(text: str, num_ads: int) -> list[AdCreative]:
    """
    Parse the LLM output into exactly num_ads creatives.
    Accepts a bare JSON array (optionally fenced in markdown) or {"ads": [...]}.
    Raises InvalidAIResponseError on anything else.
    """
    cleaned = re.sub(r"```(?:json)?\s*|\s*```", "", text or "").strip()
    if not cleaned:
        raise InvalidAIResponseError("Empty response from AI")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise InvalidAIResponseError(f"Response is not JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("ads"), list):
        data = data["ads"]
    if not isinstance(data, list):
        raise InvalidAIResponseError("Response is not a JSON array")
    if len(data) < num_ads:
        raise InvalidAIResponseError(f"Expected {num_ads} ads, got {len(data)}")

    creatives = []
    for i, item in enumerate(data[:num_ads]):
        if not isinstance(item, dict):
            raise InvalidAIResponseError(f"Ad {i + 1} is not an object")
        try:
            creatives.append(AdCreative.model_validate(item))
        except ValidationError as e:
            raise InvalidAIResponseError(f"Ad {i + 1} is missing required fields: {e.error_count()} errors") from e
    return creatives


async def generate_ad_copy(
    keyword: str,
    display_url: str,
    landing_url: str,
    num_ads: int = 3,
    custom_prompt: Optional[str] = None,
    ai: Optional[AIService] = None,
    today: Optional[date] = None,
) -> AdCopyResult:
    """Draft num_ads creatives. Never raises for upstream problems; degrades to templates."""
    if ai is None:
        try:
            ai = create_ai_service()
        except ValueError as e:
            logger.warning(f"AI not configured ({e}); using template ad copy")
            return fallback_ad_copy(keyword, num_ads, today)

    prompt = build_prompt(keyword, display_url, landing_url, num_ads, custom_prompt)
    try:
        content = await asyncio.wait_for(ai.complete(prompt), timeout=settings.ai_timeout_seconds)
        creatives = parse_ai_response(content, num_ads)
    except asyncio.TimeoutError:
        logger.error(f"AI ad copy timed out after {settings.ai_timeout_seconds}s; using templates")
        return fallback_ad_copy(keyword, num_ads, today)
    except InvalidAIResponseError as e:
        logger.error(f"AI ad copy rejected: {e}; using templates")
        return fallback_ad_copy(keyword, num_ads, today)
    except Exception as e:
        logger.error(f"AI ad copy failed: {e}; using templates")
        return fallback_ad_copy(keyword, num_ads, today)

    logger.info(f"Generated {len(creatives)} AI ad creatives for '{keyword}' via {ai.provider}")
    return _result(creatives, keyword, today)
