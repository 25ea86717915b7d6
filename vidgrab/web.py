"""HTTP helpers, text matching and extraction errors used by the extractors."""

from __future__ import annotations

import posixpath
import re
from urllib.parse import urljoin, urlsplit

import requests
from bs4 import BeautifulSoup

from .config import FAKE_HEADERS

_TIMEOUT = 30


class ExtractError(Exception):
    """Raised when data cannot be extracted from a page."""


class URLParseFailed(ExtractError):
    """The page did not contain what was expected."""

    def __init__(self, message: str = "url parse failed") -> None:
        super().__init__(message)


class LoginRequired(ExtractError):
    """The content is only available to logged-in users."""

    def __init__(self, message: str = "login required") -> None:
        super().__init__(message)


def _headers(referer: str, extra: dict[str, str] | None) -> dict[str, str]:
    # requests negotiates compression itself and cannot decode sdch.
    headers = {k: v for k, v in FAKE_HEADERS.items() if k != "Accept-Encoding"}
    if referer:
        headers["Referer"] = referer
    if extra:
        headers.update(extra)
    return headers


def get_bytes(url: str, referer: str = "", headers: dict[str, str] | None = None) -> bytes:
    """Fetch ``url`` and return the response body."""
    response = requests.get(url, headers=_headers(referer, headers), timeout=_TIMEOUT)
    return response.content


def get_text(url: str, referer: str = "", headers: dict[str, str] | None = None) -> str:
    """Fetch ``url`` and return the body decoded as UTF-8."""
    return get_bytes(url, referer, headers).decode("utf-8", errors="replace")


def content_size(url: str, referer: str = "") -> int:
    """Return the Content-Length of ``url`` without reading the body."""
    with requests.get(
        url, headers=_headers(referer, None), stream=True, timeout=_TIMEOUT
    ) as response:
        length = response.headers.get("Content-Length")
    if length is None:
        raise ExtractError(f"no content length for {url}")
    try:
        return int(length)
    except ValueError:
        raise ExtractError(f"bad content length {length!r} for {url}") from None


def match_one_of(text: str, *args: str) -> list[str] | None:
    """Return the groups of the first pattern that matches, whole match first."""
    for pattern in args:
        match = re.search(pattern, text)
        if match is not None:
            return [match.group(0), *(g or "" for g in match.groups())]
    return None


def match_all(text: str, pattern: str) -> list[list[str]]:
    """Return the groups of every match of ``pattern``, whole match first."""
    return [
        [m.group(0), *(g or "" for g in m.groups())]
        for m in re.finditer(pattern, text)
    ]


def name_and_ext(url: str) -> tuple[str, str]:
    """Return the file name and extension of ``url``.

    When the path has no extension the Content-Type of the resource is used.
    """
    base = posixpath.basename(urlsplit(url).path)
    name, dot, ext = base.rpartition(".")
    if dot and name and ext:
        return name, ext
    with requests.get(
        url, headers=_headers("", None), stream=True, timeout=_TIMEOUT
    ) as response:
        content_type = response.headers.get("Content-Type", "")
    mime = content_type.split(";", 1)[0].strip()
    _, slash, subtype = mime.partition("/")
    if not slash or not subtype:
        raise ExtractError(f"cannot tell the file type of {url}")
    return base, subtype


def m3u8_urls(url: str) -> list[str]:
    """Return the absolute segment URLs listed in the m3u8 playlist at ``url``."""
    playlist = get_text(url, url)
    return [
        urljoin(url, line)
        for line in (raw.strip() for raw in playlist.splitlines())
        if line and not line.startswith("#")
    ]


def page_title(html: str) -> str:
    """Return the text of the page's <title>, or an empty string."""
    tag = BeautifulSoup(html, "html.parser").title
    return tag.get_text().strip() if tag is not None else ""