"""Extractor for videos on mgtv.com."""

from __future__ import annotations

import base64
import json
import time

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import (
    ExtractError,
    URLParseFailed,
    get_bytes,
    get_text,
    m3u8_urls,
    match_all,
    match_one_of,
)

_SITE = "芒果TV mgtv.com"
_API = "https://pcweb.api.mgtv.com/player"
_DEVICE = "did=f11dee65-4e0d-4d25-bfce-719ad9dc991d|pno=1030|ver=5.5.1|"
_HEADERS = {"Cookie": "PM_CHKID=1"}


def encode_tk2(text: str) -> str:
    """Return the reversed base64 encoding of ``text``."""
    return base64.b64encode(text.encode()).decode()[::-1]


def _load(raw: str | bytes) -> dict:
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ExtractError(f"bad response: {exc}") from exc
    return payload if isinstance(payload, dict) else {}


def _segments(playlist_url: str) -> list[Url]:
    segments = m3u8_urls(playlist_url)
    sizes = match_all(get_text(playlist_url, playlist_url), r"#EXT-MGTV-File-SIZE:(\d+)")
    if len(sizes) < len(segments):
        raise URLParseFailed()
    return [
        Url(url=segment, size=int(size[1]), ext="ts")
        for segment, size in zip(segments, sizes)
    ]


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return every quality of the video at ``url``."""
    html = get_text(url, url)
    vid = match_one_of(
        url,
        r"https?://www.mgtv.com/(?:b|l)/\d+/(\d+).html",
        r"https?://www.mgtv.com/hz/bdpz/\d+/(\d+).html",
    )
    if vid is None:
        vid = match_one_of(html, r"vid: (\d+),")
    if vid is None or len(vid) < 2:
        raise URLParseFailed()

    clit = f"clit={int(time.time()) // 1000}"
    pm2 = _load(
        get_text(
            f"{_API}/video?video_id={vid[1]}&tk2={encode_tk2(_DEVICE + clit)}",
            url,
            _HEADERS,
        )
    )
    pm2_data = pm2.get("data") or {}
    pm2_value = (pm2_data.get("atc") or {}).get("pm2", "")

    source = _load(
        get_text(
            f"{_API}/getSource?video_id={vid[1]}&tk2={encode_tk2(clit)}&pm2={pm2_value}",
            url,
            _HEADERS,
        )
    )
    source_data = source.get("data") or {}

    info = pm2_data.get("info") or {}
    title = f"{info.get('title', '')} {info.get('desc', '')}".strip()

    domains = source_data.get("stream_domain") or []
    streams: dict[str, Stream] = {}
    for entry in source_data.get("stream") or []:
        path = entry.get("url", "")
        if not path:
            continue
        if not domains:
            raise URLParseFailed()
        address = _load(get_bytes(domains[0] + path, url, _HEADERS))
        urls = _segments(address.get("info", ""))
        streams[entry.get("def", "")] = Stream(
            urls=urls,
            quality=entry.get("name", ""),
            size=sum(u.size for u in urls),
        )

    return [
        Data(
            site=_SITE,
            title=title,
            type="video",
            streams=streams,
            url=url,
        )
    ]