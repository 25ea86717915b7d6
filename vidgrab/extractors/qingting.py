"""Extractor for audio channels on qingting.fm."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor

import requests

from ..config import Settings
from ..models import Data, Stream, Url
from ..web import ExtractError, URLParseFailed, content_size, get_text

_SITE = "qingting fm"
_CHANNEL_API = "http://i.qingting.fm/wapi/channels/"
_AUDIO_HOST = "http://od.qingting.fm/"


def channel_id(uri: str) -> str:
    """Return the channel identifier, the last path segment of ``uri``."""
    return uri.split("/")[-1]


def channel_info_url(channel: str) -> str:
    """Return the API address describing ``channel``."""
    return _CHANNEL_API + channel


def channel_audio_info_url(channel: str) -> str:
    """Return the API address listing the programs of ``channel``."""
    return f"{_CHANNEL_API}{channel}/programs/page/1/pagesize/250"


def audio_file_url(file_path: str) -> str:
    """Return the download address of an audio file."""
    return _AUDIO_HOST + file_path


def _load(raw: str) -> dict:
    try:
        payload = json.loads(raw)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _audio(info: dict, uri: str) -> Data:
    audio_url = audio_file_url(info.get("file_path", ""))
    try:
        size = content_size(audio_url, uri)
    except (ExtractError, requests.RequestException):
        return Data.empty(uri, URLParseFailed())
    stream = Stream(urls=[Url(url=audio_url, size=size, ext="m4a")], size=size)
    return Data(
        site=_SITE,
        title=info.get("name", ""),
        type="audio",
        streams={"default": stream},
        url=uri,
    )


def extract(url: str, settings: Settings | None = None) -> list[Data]:
    """Return the selected programs of the channel at ``url``.

    A program whose audio cannot be reached is returned with its error set.
    """
    settings = settings or Settings()
    channel = channel_id(url)
    try:
        get_text(channel_info_url(channel))
    except requests.RequestException:
        raise URLParseFailed() from None

    programs = _load(get_text(channel_audio_info_url(channel))).get("data")
    if not isinstance(programs, list):
        programs = []
    wanted = [programs[i - 1] or {} for i in settings.selected_items(len(programs))]

    with ThreadPoolExecutor(max_workers=settings.thread_number) as pool:
        return list(pool.map(lambda info: _audio(info, url), wanted))