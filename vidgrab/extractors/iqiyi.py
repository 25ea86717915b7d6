"""Extractor for videos on iqiyi.com."""

from __future__ import annotations

import hashlib
import json
import random
import time

from bs4 import BeautifulSoup

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, get_text, match_one_of, name_and_ext

_SITE = "爱奇艺 iqiyi.com"
_REFERER = "https://www.iqiyi.com"
_VPS_HOST = "http://cache.video.qiyi.com"
_MAC_CHARS = "abcdefghijklnmopqrstuvwxyz0123456789"


def mac_id() -> str:
    """Return a random 32-character client identifier."""
    return "".join(random.choice(_MAC_CHARS) for _ in range(32))


def vf(params: str) -> str:
    """Return the signature the vps API expects for ``params``."""
    suffix = []
    for j in range(8):
        for k in range(4):
            v4 = 13 * (66 * k + 27 * j) % 35
            suffix.append(chr(v4 + 88 if v4 >= 10 else v4 + 49))
    return hashlib.md5((params + "".join(suffix)).encode()).hexdigest()


def _vps(tvid: str, vid: str) -> dict:
    stamp = int(time.time()) * 1000
    params = (
        f"/vps?tvid={tvid}&vid={vid}&v=0&qypid={tvid}_12&src=01012001010000000000"
        f"&t={stamp}&k_tag=1&k_uid={mac_id()}&rs=1"
    )
    api_url = f"{_VPS_HOST}{params}&vf={vf(params)}"
    info = get_text(api_url, _REFERER)
    try:
        payload = json.loads(info)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    link = soup.select_one("h1 > a")
    title = link.get_text().strip() if link is not None else ""
    for tag in ("span", "em"):
        found = soup.select_one(f"h1 > {tag}")
        sub = found.get_text().strip() if found is not None else ""
        if sub:
            title += sub
            break
    if not title:
        title = "".join(tag.get_text() for tag in soup.find_all("title"))
    return title


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return every quality of the video at ``url``."""
    html = get_text(url, _REFERER)
    tvid = match_one_of(url, r"#curid=(.+)_", r"tvid=([^&]+)")
    if tvid is None:
        tvid = match_one_of(
            html,
            r'data-player-tvid="([^"]+)"',
            r"param\['tvid'\]\s*=\s*\"(.+?)\"",
            r'"tvid":"(\d+)"',
        )
    if tvid is None or len(tvid) < 2:
        raise URLParseFailed()

    vid = match_one_of(url, r"#curid=.+_(.*)$", r"vid=([^&]+)")
    if vid is None:
        vid = match_one_of(
            html,
            r'data-player-videoid="([^"]+)"',
            r"param\['vid'\]\s*=\s*\"(.+?)\"",
            r'"vid":"(\w+)"',
        )
    if vid is None or len(vid) < 2:
        raise URLParseFailed()

    title = _title(html)
    videos = _vps(tvid[1], vid[1])
    if videos.get("code") != "A00000":
        raise ExtractError(f"can't play this video: {videos.get('msg', '')}")

    vp = (videos.get("data") or {}).get("vp") or {}
    prefix = vp.get("du", "")
    tracks = vp.get("tkl") or []
    if not tracks:
        raise URLParseFailed()

    streams: dict[str, Stream] = {}
    for video in (tracks[0] or {}).get("vs") or []:
        urls = []
        for fragment in video.get("fs") or []:
            raw = get_text(prefix + fragment.get("l", ""), _REFERER)
            try:
                real_url = (json.loads(raw) or {}).get("l", "")
            except (ValueError, AttributeError) as exc:
                raise ExtractError(f"bad fragment response: {exc}") from exc
            _, ext = name_and_ext(real_url)
            urls.append(Url(url=real_url, size=fragment.get("b", 0), ext=ext))
        streams[str(video.get("bid", 0))] = Stream(
            urls=urls, quality=video.get("scrsz", ""), size=video.get("vsize", 0)
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