"""
Fake Search Engine — Database Models
One table of sponsored listings keyed by search keyword.
"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Text, Integer, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from fakesearch.database import Base

DEFAULT_PRIORITY = 1
DEFAULT_UTM_SOURCE = "google"
DEFAULT_UTM_MEDIUM = "paid_search"


def _utcnow() -> datetime:
    """Naive UTC now — matches DB columns (TIMESTAMP WITHOUT TIME ZONE)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ══════════════════════════════════════════════════════════════════════
#  ADS — Sponsored listings shown above organic results
# ══════════════════════════════════════════════════════════════════════

class Ad(Base):
    """A sponsored ad, matched case-insensitively on its keyword."""
    __tablename__ = "ads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    keyword: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    display_url: Mapped[str] = mapped_column(Text, nullable=False)
    final_url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    description2: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, default=DEFAULT_PRIORITY, nullable=False)
    utm_source: Mapped[Optional[str]] = mapped_column(String(255), default=DEFAULT_UTM_SOURCE)
    utm_medium: Mapped[Optional[str]] = mapped_column(String(255), default=DEFAULT_UTM_MEDIUM)
    utm_campaign: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Ad id={self.id} keyword={self.keyword!r} priority={self.priority}>"


Index("ix_ads_keyword_lower", func.lower(Ad.keyword))
