"""Extractor for videos and images on instagram.com."""

from __future__ import annotations

import json

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import URLParseFailed, content_size, get_text, match_one_of, page_title

_SITE = "Instagram instagram.com"


def _single(source: str, referer: str, ext: str) -> Stream:
    size = content_size(source, referer)
    return Stream(urls=[Url(url=source, size=size, ext=ext)], size=size)


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the video, image or album posted at ``url``."""
    html = get_text(url, url)
    title = page_title(html)

    found = match_one_of(html, r"window\._sharedData\s*=\s*(.*);")
    if found is None or len(found) < 2:
        raise URLParseFailed()
    try:
        shared = json.loads(found[1]) or {}
        post = (shared.get("entry_data") or {}).get("PostPage") or []
        media = ((post[0] or {}).get("graphql") or {}).get("shortcode_media") or {}
    except (ValueError, IndexError, AttributeError):
        raise URLParseFailed() from None

    video_url = media.get("video_url") or ""
    if video_url:
        data_type = "video"
        stream = _single(video_url, url, "mp4")
    else:
        data_type = "image"
        edges = (media.get("edge_sidecar_to_children") or {}).get("edges")
        if edges is None:
            stream = _single(media.get("display_url", ""), url, "jpg")
        else:
            urls = []
            for edge in edges:
                source = ((edge or {}).get("node") or {}).get("display_url", "")
                urls.append(Url(url=source, size=content_size(source, url), ext="jpg"))
            stream = Stream(urls=urls, size=sum(u.size for u in urls))

    return [
        Data(
            site=_SITE,
            title=title,
            type=data_type,
            streams={"default": stream},
            url=url,
        )
    ]