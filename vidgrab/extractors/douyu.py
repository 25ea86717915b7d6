"""Extractor for recorded videos on v.douyu.com."""

from __future__ import annotations

import json

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text, m3u8_urls, match_one_of

_SITE = "斗鱼 douyu.com"
_INFO_API = "http://vmobile.douyu.com/video/getInfo?vid="


def _segments(playlist_url: str) -> list[Url]:
    return [
        Url(url=segment, size=content_size(segment, playlist_url), ext="ts")
        for segment in m3u8_urls(playlist_url)
    ]


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the video at ``url``; live rooms are not supported."""
    if match_one_of(url, r"https?://www.douyu.com/(\S+)") is not None:
        raise ExtractError("暂不支持斗鱼直播")

    html = get_text(url, url)
    titles = match_one_of(html, r"<title>(.*?)</title>")
    if titles is None or len(titles) < 2:
        raise URLParseFailed()
    title = titles[1]

    vids = match_one_of(url, r"https?://v.douyu.com/show/(\S+)")
    if vids is None or len(vids) < 2:
        raise URLParseFailed()

    info = get_text(_INFO_API + vids[1], url)
    try:
        payload = json.loads(info) or {}
    except ValueError:
        payload = {}
    video_url = (payload.get("data") or {}).get("video_url", "")
    if not video_url:
        raise URLParseFailed()

    urls = _segments(video_url)
    stream = Stream(urls=urls, size=sum(u.size for u in urls))
    return [
        Data(
            site=_SITE,
            title=title,
            type="video",
            streams={"default": stream},
            url=url,
        )
    ]