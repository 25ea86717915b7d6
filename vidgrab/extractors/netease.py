"""Extractor for music videos on music.163.com."""

from __future__ import annotations

from urllib.parse import unquote_plus

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text, match_one_of

_SITE = "网易云音乐 music.163.com"


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the MV or video at ``url``."""
    url = url.replace("/#/", "/", 1)
    if match_one_of(url, r"/(mv|video)\?id=(\w+)") is None:
        raise ExtractError("invalid url for netease music")

    html = get_text(url, url)
    if "u-errlg-404" in html:
        raise ExtractError("404 music not found")

    titles = match_one_of(html, r'<meta property="og:title" content="(.+?)" />')
    if titles is None or len(titles) < 2:
        raise URLParseFailed()
    title = titles[1]

    found = match_one_of(html, r'<meta property="og:video" content="(.+?)" />')
    if found is None or len(found) < 2:
        raise URLParseFailed()
    real_url = unquote_plus(found[1])

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