"""Extractor for course videos on time.geekbang.org."""

from __future__ import annotations

import json

import requests

from ..config import FAKE_HEADERS, Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, m3u8_urls, match_one_of

_SITE = "极客时间 geekbang.org"
_ARTICLE_API = "https://time.geekbang.org/serv/v1/article"
_TIMEOUT = 30


def _fetch_article(article_id: str, referer: str) -> dict:
    headers = {k: v for k, v in FAKE_HEADERS.items() if k != "Accept-Encoding"}
    headers.update(
        {
            "Origin": "https://time.geekbang.org",
            "Content-Type": "application/json",
            "Referer": referer,
        }
    )
    body = '{"id":' + article_id + "}"
    response = requests.post(
        _ARTICLE_API, data=body.encode(), headers=headers, timeout=_TIMEOUT
    )
    try:
        return response.json() or {}
    except ValueError as exc:
        raise ExtractError(f"bad article response: {exc}") from exc


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return every quality of the course video at ``url``."""
    matches = match_one_of(url, r"https?://time.geekbang.org/course/detail/(\d+)-(\d+)")
    if matches is None or len(matches) < 3:
        raise URLParseFailed()

    article = _fetch_article(matches[2], url)
    if article.get("code", 0) < 0:
        raise ExtractError(json.dumps(article.get("error"), ensure_ascii=False))

    details = article.get("data") or {}
    title = details.get("article_sharetitle", "")

    streams: dict[str, Stream] = {}
    for key, media in (details.get("video_media_map") or {}).items():
        urls = [Url(url=segment, size=0, ext="ts") for segment in m3u8_urls(media.get("url", ""))]
        streams[key] = Stream(urls=urls, quality=key, size=media.get("size", 0))

    return [
        Data(
            site=_SITE,
            title=title,
            type="video",
            streams=streams,
            url=url,
        )
    ]