"""Fetch metadata of a web page (and YouTube video) to prefill new bookmarks."""
import ipaddress
import logging
import re
import socket
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from core.config import Settings
from schemas.webpage_info import WebpageInfoResponse

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; Bookmarks/1.0)'
DEFAULT_TIMEOUT = 10.0

YOUTUBE_VIDEOS_URL = 'https://www.googleapis.com/youtube/v3/videos'
YOUTUBE_TITLE_SUFFIX = ' - YouTube'

ISO_DURATION_PATTERN = re.compile(r'^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$')


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def is_private_ip(ip_str: str) -> bool:
    """Check if an IP address is private, loopback, or otherwise internal."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        # Unparseable addresses are treated as internal
        return True
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


def validate_url_not_private(url: str) -> None:
    """
    Validate that a URL does not target a private/internal network.

    The hostname is resolved so that names pointing at internal addresses are
    blocked as well.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the hostname does not resolve.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise ValueError(f"Unsupported URL scheme: {url}")
    hostname = parsed.hostname
    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ('localhost', 'localhost.localdomain'):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addrinfo = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e
    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


@dataclass
class PageMetadata:
    """Title and meta description extracted from HTML."""

    title: str | None
    description: str | None


@dataclass
class VideoDetails:
    """The parts of a YouTube video resource used for bookmarks."""

    title: str | None
    published_on: str | None
    duration: str | None


def format_duration(iso_duration: str | None) -> str | None:
    """
    Format an ISO 8601 video duration for display.

    Seconds are dropped. Durations without a minutes part have no display form.

    Examples:
        >>> format_duration('PT6M10S')
        '6min'
        >>> format_duration('PT2H18M43S')
        '2h:18min'
    """
    if not iso_duration:
        return None
    match = ISO_DURATION_PATTERN.match(iso_duration)
    if match is None:
        return None
    hours, minutes, _ = match.groups()
    if not minutes:
        return None
    if hours:
        return f"{int(hours)}h:{int(minutes)}min"
    return f"{int(minutes)}min"


def extract_page_metadata(html: str) -> PageMetadata:
    """
    Extract the title and meta description from HTML.

    Pure function with no I/O. Falls back to Open Graph tags when the standard
    tags are missing.
    """
    soup = BeautifulSoup(html, 'lxml')

    title = None
    title_tag = soup.find('title')
    if title_tag and title_tag.string:
        title = title_tag.string.strip()
    if not title:
        og_title = soup.find('meta', property='og:title')
        if og_title and og_title.get('content'):
            title = og_title['content'].strip()

    description = None
    meta_desc = soup.find('meta', attrs={'name': 'description'})
    if meta_desc and meta_desc.get('content'):
        description = meta_desc['content'].strip()
    if not description:
        og_desc = soup.find('meta', property='og:description')
        if og_desc and og_desc.get('content'):
            description = og_desc['content'].strip()

    return PageMetadata(title=title or None, description=description or None)


def title_with_duration(title: str | None, duration: str | None) -> str | None:
    """Replace YouTube's ' - YouTube' title suffix with the video duration."""
    if not title or not duration:
        return title
    if title.endswith(YOUTUBE_TITLE_SUFFIX):
        title = title[:-len(YOUTUBE_TITLE_SUFFIX)]
    return f"{title.rstrip()} - {duration}"


async def fetch_html(url: str, timeout: float = DEFAULT_TIMEOUT) -> tuple[str | None, str | None]:  # noqa: ASYNC109
    """
    Fetch an HTML page.

    Best-effort fetch that returns an error message on failure rather than raising.
    Both the requested URL and the final URL after redirects are SSRF checked.

    Returns:
        Tuple of (html, error). Exactly one of them is None.
    """
    try:
        validate_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        return None, str(e)

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            http2=True,
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException:
        return None, "Request timed out"
    except httpx.RequestError as e:
        return None, f"Request failed: {e}"

    try:
        validate_url_not_private(str(response.url))
    except (SSRFBlockedError, ValueError) as e:
        return None, f"Redirect blocked: {e}"

    if not response.is_success:
        return None, f"HTTP {response.status_code}"
    content_type = response.headers.get('content-type', '')
    if 'text/html' not in content_type.lower():
        return None, f"Unsupported content type: {content_type}"
    return response.text, None


async def fetch_youtube_video(
    video_id: str,
    api_key: str,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> VideoDetails | None:
    """
    Look up a video with the YouTube Data API v3.

    Returns None when the API key is not configured, the call fails or the video
    does not exist.
    """
    if not api_key:
        logger.warning("YOUTUBE_API_KEY is not set, skipping video lookup for %s", video_id)
        return None
    params = {'id': video_id, 'key': api_key, 'part': 'snippet,contentDetails'}
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(YOUTUBE_VIDEOS_URL, params=params)
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("YouTube API call for video %s failed: %s", video_id, e)
        return None

    items = payload.get('items') or []
    if not items:
        logger.warning("YouTube video %s not found", video_id)
        return None
    snippet = items[0].get('snippet') or {}
    content_details = items[0].get('contentDetails') or {}
    published_at = snippet.get('publishedAt')
    return VideoDetails(
        title=snippet.get('title'),
        published_on=published_at[:10] if published_at else None,
        duration=format_duration(content_details.get('duration')),
    )


async def get_webpage_info(
    url: str,
    youtube_video_id: str | None,
    settings: Settings,
) -> WebpageInfoResponse:
    """
    Collect the information used to prefill a bookmark for a URL.

    Args:
        url: Page to fetch.
        youtube_video_id: When given, title, publish date and duration come from the
            YouTube Data API as well.
        settings: Provides the YouTube API key.

    Returns:
        Whatever could be determined; `error` tells why the page could not be fetched.
    """
    html, error = await fetch_html(url)
    if error:
        logger.warning("Could not fetch %s: %s", url, error)
    metadata = extract_page_metadata(html) if html else PageMetadata(None, None)
    info = WebpageInfoResponse(
        title=metadata.title,
        meta_description=metadata.description,
        error=error,
    )

    if youtube_video_id:
        video = await fetch_youtube_video(youtube_video_id, settings.youtube_api_key)
        if video is not None:
            info.published_on = video.published_on
            info.video_duration = video.duration
            info.title = title_with_duration(info.title or video.title, video.duration)
    return info
