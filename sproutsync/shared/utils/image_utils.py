# 📄 File: sproutsync/shared/utils/image_utils.py

# 🧭 Purpose (Layman Explanation):
# Downloads a plant picture from a link the user pastes, even when the link points to
# a search results page or a web page that merely contains the picture.

# 🧪 Purpose (Technical Summary):
# Magic-byte image sniffing, MIME detection by bytes or extension, unwrapping of Bing/Google
# image result URLs, og:image/twitter:image/<img> extraction and an httpx fetcher that
# follows embedded images up to a redirect budget.

# 🔗 Dependencies:
# - httpx (async HTTP client)
# - re, urllib.parse (stdlib)
# - sproutsync.shared.core.exceptions

# 🔄 Connected Modules / Calls From:
# ai_smart_features identification and health services (image URL endpoints)

import logging
import re
from typing import List, Optional
from urllib.parse import parse_qs, urljoin, urlparse

import httpx

from sproutsync.shared.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "image/*,text/html,application/xhtml+xml,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}
FETCH_TIMEOUT_SECONDS = 15.0

_OG_IMAGE = re.compile(r"""<meta[^>]+property=['"]og:image['"][^>]+content=['"]([^'"]+)['"][^>]*>""", re.I)
_TWITTER_IMAGE = re.compile(r"""<meta[^>]+name=['"]twitter:image['"][^>]+content=['"]([^'"]+)['"][^>]*>""", re.I)
_IMG_SRC = re.compile(r"""<img[^>]+src=['"]([^'"]+)['"][^>]*>""", re.I)

_EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
}


# =============================================================================
# BYTE SNIFFING
# =============================================================================

def is_image_buffer(data: bytes) -> bool:
    """Check magic bytes for JPEG, PNG, GIF, WebP or BMP."""
    if len(data) < 4:
        return False

    if data[:2] == b"\xff\xd8":
        return True
    if data[:4] == b"\x89PNG":
        return True
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return True
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return True
    if data[:2] == b"BM":
        return True

    return False


def get_mime_type_from_buffer(data: bytes) -> str:
    """MIME type from magic bytes, defaulting to image/jpeg."""
    header = data[:12]

    if header[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if header[:4] == b"\x89PNG":
        return "image/png"
    if header[:3] == b"GIF":
        return "image/gif"
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"
    if header[:2] == b"BM":
        return "image/bmp"
    if header[4:8] == b"ftyp":
        return "image/heic"

    logger.debug("Could not determine MIME type from buffer, defaulting to image/jpeg")
    return "image/jpeg"


def get_mime_type_from_url(url: str) -> str:
    """MIME type from the file extension of a URL path, defaulting to image/jpeg."""
    clean_url = url.split("?")[0].split("#")[0]
    extension = clean_url.lower().rsplit(".", 1)[-1] if "." in clean_url else ""
    return _EXTENSION_MIME_TYPES.get(extension, "image/jpeg")


# =============================================================================
# URL HELPERS
# =============================================================================

def extract_image_url_from_search_engine(url: str) -> str:
    """
    Unwrap image result links from Bing (mediaurl) and Google (/imgres?imgurl=).

    Any other URL is returned unchanged.
    """
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    hostname = parsed.hostname or ""

    if "bing.com" in hostname and query.get("mediaurl"):
        return query["mediaurl"][0]

    if "google." in hostname and "/imgres" in parsed.path and query.get("imgurl"):
        return query["imgurl"][0]

    return url


def extract_image_from_html(html: str, base_url: str) -> Optional[str]:
    """
    Find the most representative image URL in an HTML page.

    Tries og:image, then twitter:image, then the first <img src>.
    """
    for pattern in (_OG_IMAGE, _TWITTER_IMAGE, _IMG_SRC):
        match = pattern.search(html)
        if match:
            return urljoin(base_url, match.group(1))
    return None


def _looks_like_html(text: str) -> bool:
    return "<html" in text or "<meta" in text or "<img" in text


# =============================================================================
# FETCHING
# =============================================================================

async def fetch_image_from_url(url: str, max_redirects: int = 3) -> bytes:
    """
    Download image bytes from a URL.

    Args:
        url: Direct image link, search result link or web page
        max_redirects: How many HTML pages may be followed to an embedded image

    Returns:
        bytes: Raw image data

    Raises:
        ExternalServiceError: If no image could be retrieved
    """
    logger.info(f"🌐 Fetching image from URL: {url}")
    actual_url = extract_image_url_from_search_engine(url)

    urls_to_try: List[str] = [actual_url]
    if actual_url != url:
        urls_to_try.append(url)

    last_error = "No valid image found at any of the attempted URLs"

    async with httpx.AsyncClient(
        headers=BROWSER_HEADERS,
        timeout=FETCH_TIMEOUT_SECONDS,
        follow_redirects=True,
    ) as client:
        for current_url in urls_to_try:
            try:
                response = await client.get(current_url)
            except httpx.HTTPError as e:
                logger.warning(f"⚠️ Failed to fetch {current_url}: {e}")
                last_error = str(e) or e.__class__.__name__
                continue

            if response.status_code >= 400:
                logger.info(f"HTTP {response.status_code} for {current_url}, trying next...")
                continue

            content = response.content
            if is_image_buffer(content):
                logger.info(f"✅ Fetched image: {len(content)} bytes from {current_url}")
                return content

            if max_redirects > 0:
                text = content.decode("utf-8", errors="ignore")
                if _looks_like_html(text):
                    image_url = extract_image_from_html(text, current_url)
                    if image_url and image_url != current_url:
                        logger.info(f"🔁 Found image in HTML: {image_url}, following...")
                        return await fetch_image_from_url(image_url, max_redirects - 1)

            logger.info(f"Content from {current_url} is neither an image nor contains an image URL")

    raise ExternalServiceError(
        f"Failed to fetch image from URL: {last_error}",
        service="image_fetch",
    )
