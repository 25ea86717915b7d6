"""Extractor for videos on v.qq.com."""

from __future__ import annotations

import json

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text, match_one_of

_SITE = "腾讯视频 v.qq.com"
_PLAYER_VERSION = "3.2.19.333"
_INFO_API = (
    "http://vv.video.qq.com/getinfo?otype=json&platform=11&defnpayver=1"
    "&appver={version}&defn=shd&vid={vid}"
)
_KEY_API = (
    "http://vv.video.qq.com/getkey?otype=json&platform=11&appver={version}"
    "&filename={filename}&format={format_id}&vid={vid}"
)
_OUTPUT = r"QZOutputJson=(.+);$"


def _prefix(format_id: int) -> str:
    if format_id > 100000:
        return "m"
    if format_id > 10000:
        return "p"
    return ""


def format_filename(base: str, format_id: int) -> str:
    """Return the file name of ``base`` for format ``format_id``.

    ``v0739eolv38.mp4`` becomes ``v0739eolv38.m701.mp4`` for format 100701;
    a plain format drops the middle part: ``e0765r4mwcr.2.mp4`` -> ``e0765r4mwcr.mp4``.
    """
    pieces = base.split(".")
    prefix = _prefix(format_id)
    if prefix:
        name = f"{prefix}{format_id % 10000}"
        if len(pieces) < 3:
            pieces.insert(1, name)
        else:
            pieces[1] = name
    elif len(pieces) >= 3:
        del pieces[1]
    return ".".join(pieces)


def _clip_filename(filename: str, clip: int) -> str:
    pieces = filename.split(".")
    if len(pieces) < 4:
        pieces.insert(2, str(clip))
    else:
        pieces[2] = str(clip)
    return ".".join(pieces)


def _output_json(text: str) -> dict:
    found = match_one_of(text, _OUTPUT)
    if found is None or len(found) < 2:
        raise URLParseFailed()
    try:
        payload = json.loads(found[1])
    except ValueError as exc:
        raise ExtractError(f"bad response: {exc}") from exc
    if not isinstance(payload, dict):
        raise URLParseFailed()
    return payload


def _streams(vid: str, cdn: str, video: dict, formats: list) -> dict[str, Stream]:
    clips = (video.get("cl") or {}).get("fc") or 1
    streams: dict[str, Stream] = {}
    for fmt in formats:
        fmt = fmt or {}
        format_id = fmt.get("id", 0)
        filename = format_filename(video.get("fn", ""), format_id)
        urls: list[Url] = []
        for clip in range(1, clips + 1):
            name = _clip_filename(filename, clip) if _prefix(format_id) == "p" else filename
            key_info = _output_json(
                get_text(
                    _KEY_API.format(
                        version=_PLAYER_VERSION, filename=name, format_id=format_id, vid=vid
                    ),
                    cdn,
                )
            )
            vkey = key_info.get("key") or video.get("fvkey", "")
            real_url = f"{cdn}{name}?vkey={vkey}"
            urls.append(Url(url=real_url, size=content_size(real_url, cdn), ext="mp4"))
        streams[fmt.get("name", "")] = Stream(
            urls=urls,
            quality=fmt.get("cname", ""),
            size=sum(u.size for u in urls),
        )
    return streams


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return every quality of the video at ``url``."""
    vids = match_one_of(url, r"vid=(\w+)", r"/(\w+)\.html")
    if vids is None or len(vids) < 2:
        raise URLParseFailed()
    vid = vids[1]

    if len(vid) != 11:
        page = get_text(url, url)
        vids = match_one_of(
            page, r"vid=(\w+)", r"vid:\s*[\"'](\w+)", r"vid\s*=\s*[\"']\s*(\w+)"
        )
        if vids is None or len(vids) < 2:
            raise URLParseFailed()
        vid = vids[1]

    info = _output_json(
        get_text(_INFO_API.format(version=_PLAYER_VERSION, vid=vid), url)
    )
    if info.get("msg"):
        raise ExtractError(str(info["msg"]))

    videos = (info.get("vl") or {}).get("vi") or []
    if not videos:
        raise URLParseFailed()
    video = videos[0] or {}
    hosts = (video.get("ul") or {}).get("ui") or []
    if not hosts:
        raise URLParseFailed()
    cdn = (hosts[-1] or {}).get("url", "")

    formats = (info.get("fl") or {}).get("fi") or []
    streams = _streams(vid, cdn, video, formats)

    return [
        Data(
            site=_SITE,
            title=video.get("ti", ""),
            type="video",
            streams=streams,
            url=url,
        )
    ]