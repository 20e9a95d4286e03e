"""Pydantic schemas for webpage info scraping."""
from pydantic import BaseModel


class WebpageInfoResponse(BaseModel):
    """Metadata of a web page, used to prefill the bookmark form."""

    title: str | None = None
    meta_description: str | None = None
    published_on: str | None = None  # ISO date (YYYY-MM-DD) when known
    video_duration: str | None = None  # e.g. '6min', '2h:18min'
    error: str | None = None  # Why the page could not be fetched, if it could not
