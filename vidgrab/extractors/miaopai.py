"""Extractor for videos on miaopai.com."""

from __future__ import annotations

import json
import random

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text, match_one_of

_SITE = "秒拍 miaopai.com"
_API = "https://n.miaopai.com/api/aj_media/info.json"
# The last character is never picked.
_CHARS = "abcdefghijklnmopqrstuvwxyz012345678"


def random_string(length: int) -> str:
    """Return ``length`` random characters joined by commas."""
    return ",".join(random.choice(_CHARS) for _ in range(length))


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the video at ``url``."""
    ids = match_one_of(url, r"/media/([^\./]+)", r"/show(?:/channel)?/([^\./]+)")
    if ids is None or len(ids) < 2:
        raise URLParseFailed()

    raw = get_text(
        f"{_API}?smid={ids[1]}&appid=530&_cb=_jsonp{random_string(10)}", url
    )
    try:
        payload = json.loads(raw) or {}
        details = payload.get("data") or {}
    except (ValueError, AttributeError) as exc:
        raise ExtractError(f"bad media info: {exc}") from exc

    meta = details.get("meta_data") or []
    if not meta:
        raise URLParseFailed()
    real_url = ((meta[0] or {}).get("play_urls") or {}).get("m", "")
    if not real_url:
        raise URLParseFailed()

    size = content_size(real_url, url)
    stream = Stream(urls=[Url(url=real_url, size=size, ext="mp4")], size=size)
    return [
        Data(
            site=_SITE,
            title=details.get("description", ""),
            type="video",
            streams={"default": stream},
            url=url,
        )
    ]