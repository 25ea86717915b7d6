"""Run-time settings shared by the extractors and the downloader."""

from __future__ import annotations

import re
from dataclasses import dataclass

VERSION = "0.9.8"

FAKE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Charset": "UTF-8,*;q=0.5",
    "Accept-Encoding": "gzip,deflate,sdch",
    "Accept-Language": "en-US,en;q=0.8",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_13_6) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/69.0.3497.81 Safari/537.36"
    ),
}

_ITEM = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")


@dataclass
class Settings:
    """Options that control extraction and downloading."""

    debug: bool = False
    info_only: bool = False
    cookie: str = ""
    playlist: bool = False
    refer: str = ""
    stream: str = ""
    output_path: str = ""
    output_name: str = ""
    extracted_data: bool = False
    chunk_size_mb: int = 0
    use_aria2_rpc: bool = False
    aria2_token: str = ""
    aria2_addr: str = "localhost:6800"
    aria2_method: str = "http"
    thread_number: int = 10
    file: str = ""
    item_start: int = 1
    item_end: int = 0
    items: str = ""
    episode_title_only: bool = False
    caption: bool = False
    retry_times: int = 10
    multi_thread: bool = False

    def __post_init__(self) -> None:
        if self.thread_number < 1:
            raise ValueError("thread_number must be at least 1")

    def selected_items(self, total: int) -> list[int]:
        """Return the 1-based positions wanted out of ``total`` items.

        ``items`` (such as ``"1,5,6,8-10"``) takes precedence over the
        ``item_start``/``item_end`` range; an ``item_end`` of 0 means the last item.
        """
        if self.items:
            chosen: set[int] = set()
            for piece in self.items.split(","):
                if not piece.strip():
                    continue
                match = _ITEM.match(piece)
                if match is None:
                    raise ValueError(f"invalid item selection: {piece!r}")
                first = int(match[1])
                last = int(match[2]) if match[2] else first
                if first > last:
                    raise ValueError(f"invalid item range: {piece!r}")
                chosen.update(range(first, last + 1))
            return sorted(i for i in chosen if 1 <= i <= total)
        start = max(self.item_start, 1)
        end = total if self.item_end <= 0 else min(self.item_end, total)
        return list(range(start, end + 1))