"""Extractor for image posts on bcy.net."""

from __future__ import annotations

import json
import re

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text, match_one_of, name_and_ext, page_title

_SITE = "半次元 bcy.net"
_TITLE_SUFFIX = " - 半次元 banciyuan - ACG爱好者社区"
_ESCAPE = re.compile(r'\\(["\\])')


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the images of the post at ``url``."""
    html = get_text(url, url)
    found = match_one_of(html, r'JSON.parse\("(.+?)"\);')
    if found is None or len(found) < 2:
        raise URLParseFailed()
    json_string = _ESCAPE.sub(r"\1", found[1])
    try:
        payload = json.loads(json_string)
    except ValueError as exc:
        raise ExtractError(f"json unmarshal failed, err: {exc}") from exc

    detail = (payload or {}).get("detail") or {}
    multi = (detail.get("post_data") or {}).get("multi") or []

    title = page_title(html).replace(_TITLE_SUFFIX, "")

    urls: list[Url] = []
    for image in multi:
        path = (image or {}).get("original_path", "")
        size = content_size(path, url)
        _, ext = name_and_ext(path)
        urls.append(Url(url=path, size=size, ext=ext))

    return [
        Data(
            site=_SITE,
            title=title,
            type="image",
            streams={"default": Stream(urls=urls, size=sum(u.size for u in urls))},
            url=url,
        )
    ]