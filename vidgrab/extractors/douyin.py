"""Extractor for short videos on douyin.com."""

from __future__ import annotations

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import URLParseFailed, content_size, get_text, match_one_of

_SITE = "抖音 douyin.com"
_DEFAULT_TITLE = "抖音短视频"


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the video shared at ``url``."""
    html = get_text(url, url)
    desc = match_one_of(html, r'<p class="desc">(.+?)</p>')
    title = desc[1] if desc is not None else _DEFAULT_TITLE

    found = match_one_of(html, r'playAddr: "(.+?)"')
    if found is None or len(found) < 2:
        raise URLParseFailed()
    real_url = found[1]

    size = content_size(real_url, url)
    stream = Stream(urls=[Url(url=real_url, size=size, ext="mp4")], size=size)
    return [
        Data(
            site=_SITE,
            title=title,
            type="video",
            streams={"default": stream},
            url=url,
        )
    ]