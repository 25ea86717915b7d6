"""Data structures describing extracted media and partial downloads."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from termcolor import colored

_MIB = 1024 * 1024
_PART = struct.Struct("<fqqq")


def _label(text: str) -> str:
    return colored(text, "cyan")


@dataclass
class Url:
    """A single downloadable resource."""

    url: str
    size: int = 0
    ext: str = ""


@dataclass
class Stream:
    """One quality variant of a media item, possibly split into fragments."""

    urls: list[Url] = field(default_factory=list)
    quality: str = ""
    size: int = 0

    def total_size(self) -> int:
        """Return the known size, or the sum of the fragment sizes if unknown."""
        return self.size or sum(u.size for u in self.urls)

    def describe(self, name: str) -> str:
        """Return a human-readable summary of this stream."""
        size = self.total_size()
        lines = [colored(f"     [{name}]  -------------------", "blue")]
        if self.quality:
            lines.append(_label("     Quality:         ") + self.quality)
        lines.append(
            _label("     Size:            ")
            + f"{size / _MIB:.2f} MiB ({size} Bytes)"
        )
        lines.append(_label("     # download with: ") + f"vidgrab -f {name} ...")
        return "\n".join(lines) + "\n"


@dataclass
class Data:
    """Everything extracted from one page."""

    site: str = ""
    title: str = ""
    type: str = ""
    streams: dict[str, Stream] = field(default_factory=dict)
    url: str = ""
    error: Exception | None = None

    @classmethod
    def empty(cls, url: str, error: Exception | None) -> Data:
        """Return a placeholder recording that extracting ``url`` failed."""
        return cls(url=url, error=error)

    def sorted_streams(self) -> list[tuple[str, Stream]]:
        """Return (name, stream) pairs, largest first, filling in unknown sizes."""
        for stream in self.streams.values():
            if stream.size == 0:
                stream.size = stream.total_size()
        return sorted(self.streams.items(), key=lambda item: item[1].size, reverse=True)

    def describe(self, stream: str, info_only: bool) -> str:
        """Return a summary of the item and either one stream or all of them."""
        lines = [
            "",
            _label(" Site:      ") + self.site,
            _label(" Title:     ") + self.title,
            _label(" Type:      ") + self.type,
        ]
        if info_only:
            lines.append(_label(" Streams:   ") + "# All available quality")
            lines.extend(s.describe(name) for name, s in self.sorted_streams())
        else:
            if stream not in self.streams:
                raise ValueError(f"no stream named {stream}")
            lines.append(_label(" Stream:   "))
            lines.append(self.streams[stream].describe(stream))
        return "\n".join(lines)


@dataclass
class FilePartMeta:
    """Header stored at the start of each part file of a threaded download."""

    index: float
    start: int
    end: int
    cur: int

    SIZE: ClassVar[int] = _PART.size

    def pack(self) -> bytes:
        """Encode the header as little-endian bytes."""
        return _PART.pack(self.index, self.start, self.end, self.cur)

    @classmethod
    def unpack(cls, raw: bytes) -> FilePartMeta:
        """Decode a header from the start of ``raw``."""
        if len(raw) < _PART.size:
            raise ValueError(
                "the part file is broken, delete all part files and download again"
            )
        return cls(*_PART.unpack_from(raw))