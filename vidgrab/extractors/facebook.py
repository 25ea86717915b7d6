"""Extractor for videos on facebook.com."""

from __future__ import annotations

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import URLParseFailed, content_size, get_text, match_one_of

_SITE = "Facebook facebook.com"
_QUALITIES = ("sd", "hd")


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the SD and HD variants of the video at ``url``."""
    html = get_text(url, url)
    titles = match_one_of(html, r'<title id="pageTitle">(.+)</title>')
    if titles is None or len(titles) < 2:
        raise URLParseFailed()
    title = titles[1]

    streams: dict[str, Stream] = {}
    for quality in _QUALITIES:
        found = match_one_of(html, f'{quality}_src_no_ratelimit:"(.+?)"')
        if found is None or len(found) < 2:
            continue
        source = found[1]
        size = content_size(source, url)
        streams[quality] = Stream(
            urls=[Url(url=source, size=size, ext="mp4")],
            quality=quality,
            size=size,
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