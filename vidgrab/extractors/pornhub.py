"""Extractor for videos on pornhub.com."""

from __future__ import annotations

import json

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text, match_one_of

_SITE = "Pornhub pornhub.com"
_DEFAULT_TITLE = "pornhub video"


def _raw_quality(definition: dict) -> str:
    """Return the quality value as it is written in the page's JSON."""
    if "quality" not in definition:
        return ""
    return json.dumps(definition["quality"], ensure_ascii=False)


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return every progressive-download quality of the video at ``url``.

    HLS streams and definitions listing several qualities at once are skipped.
    """
    html = get_text(url, url)
    desc = match_one_of(html, r'<span class="inlineFree">(.+?)</span>')
    title = desc[1] if desc is not None and len(desc) > 1 else _DEFAULT_TITLE

    found = match_one_of(html, r'"mediaDefinitions":(.+?),"isVertical"')
    if found is None or len(found) < 2:
        raise URLParseFailed()
    try:
        definitions = json.loads(found[1])
    except ValueError as exc:
        raise ExtractError(f"bad media definitions: {exc}") from exc
    if not isinstance(definitions, list):
        raise ExtractError("bad media definitions: not a list")

    streams: dict[str, Stream] = {}
    for definition in definitions:
        definition = definition or {}
        if definition.get("format") == "hls":
            continue
        quality = _raw_quality(definition)
        if "[" in quality:
            continue
        real_url = definition.get("videoUrl") or ""
        if not real_url:
            continue
        size = content_size(real_url, url)
        streams[quality] = Stream(
            urls=[Url(url=real_url, size=size, ext="mp4")],
            quality=f"{quality}P",
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