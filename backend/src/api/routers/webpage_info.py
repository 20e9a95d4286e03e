"""Webpage info endpoint used to prefill new bookmarks."""
from fastapi import APIRouter, Depends, Query

from api.dependencies import CurrentUser, get_current_user, get_settings
from core.config import Settings
from schemas.webpage_info import WebpageInfoResponse
from services.webpage_info_service import get_webpage_info

router = APIRouter(prefix="/api/webpage-info", tags=["webpage-info"])


@router.get("/scrape", response_model=WebpageInfoResponse)
async def scrape_webpage(
    url: str = Query(..., description="Page to fetch"),
    youtube_video_id: str | None = Query(default=None),
    _current_user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> WebpageInfoResponse:
    """
    Fetch the title and meta description of a page.

    With a YouTube video id, the publish date and video duration are looked up too.
    Fetch problems are reported in `error` instead of failing the request.
    """
    return await get_webpage_info(url, youtube_video_id, settings)
