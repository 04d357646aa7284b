"""
Request/response models shared by routers and services.
JSON keys are camelCase; snake_case keys are accepted on input.
"""

from typing import Annotated, Optional
from pydantic import (
    BaseModel, ConfigDict, Field, AliasChoices, AfterValidator,
    field_validator, model_validator,
)
from pydantic.alias_generators import to_camel
from fakesearch.models import DEFAULT_PRIORITY, DEFAULT_UTM_SOURCE, DEFAULT_UTM_MEDIUM
from fakesearch.services.attribution import ensure_absolute_url


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Ads: input ────────────────────────────────────────────────────────

class AdPayload(CamelModel):
    """Everything an admin submits for one ad, before defaults are applied."""
    title: str
    display_url: str
    final_url: str = Field(validation_alias=AliasChoices("finalUrl", "final_url", "url"))
    description: str
    description2: Optional[str] = None
    priority: Optional[int] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    @field_validator("title", "display_url", "final_url", "description")
    @classmethod
    def _required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("description2", "utm_source", "utm_medium", "utm_campaign")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("final_url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        return ensure_absolute_url(v)

    @model_validator(mode="after")
    def _apply_defaults(self) -> "AdPayload":
        if self.priority is None:
            self.priority = DEFAULT_PRIORITY
        if self.utm_source is None:
            self.utm_source = DEFAULT_UTM_SOURCE
        if self.utm_medium is None:
            self.utm_medium = DEFAULT_UTM_MEDIUM
        return self


def _clean_keyword(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("keyword must not be empty")
    return v


Keyword = Annotated[str, AfterValidator(_clean_keyword)]


class SaveAdRequest(CamelModel):
    """Create (editing = -1) or update the ad at a listing position."""
    keyword: Keyword
    ad: AdPayload
    editing: int = -1


class UpdateAdRequest(CamelModel):
    keyword: Keyword
    ad: AdPayload


class DeleteAdRequest(CamelModel):
    index: int = Field(ge=0)


# ── Ads: output ───────────────────────────────────────────────────────

class AdView(CamelModel):
    """An ad as served on a results page, with its click-through URL."""
    title: str
    display_url: str
    url: str
    description: str
    description2: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None


class AdDetail(CamelModel):
    title: str
    display_url: str
    url: str
    description: str
    description2: Optional[str] = None
    priority: int
    utm_source: str
    utm_medium: str
    utm_campaign: Optional[str] = None


class AdListEntry(CamelModel):
    id: int
    keyword: str
    ad: AdDetail


class KeywordGroup(CamelModel):
    keyword: str
    ads: list[AdListEntry]


class AdGroupsPage(CamelModel):
    groups: list[KeywordGroup]
    total_groups: int
    total_pages: int
    current_page: int
    per_page: int
    has_next_page: bool
    has_prev_page: bool


# ── Ad copy generation ────────────────────────────────────────────────

class GenerateAdsRequest(CamelModel):
    keyword: str = Field(min_length=1)
    display_url: str = Field(min_length=1)
    landing_url: str = Field(min_length=1)
    num_ads: int = Field(default=3, ge=1, le=10)
    custom_prompt: Optional[str] = None


class AdCreative(CamelModel):
    title: str = Field(min_length=1)
    title2: Optional[str] = None
    description: str = Field(min_length=1)
    description2: str = Field(min_length=1)
    target_audience: str = Field(min_length=1)
    campaign_focus: str = Field(min_length=1)


class AdCopyResult(CamelModel):
    ads: list[AdCreative]
    campaign_names: list[str]


# ── Organic search ────────────────────────────────────────────────────

class SearchResult(CamelModel):
    title: str
    url: str
    description: str
    favicon: Optional[str] = None
