"""Saving extracted media to disk, with resumable, chunked and threaded transfers."""

from __future__ import annotations

import itertools
import os
import re
import shutil
import struct
import time
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from typing import BinaryIO

import requests
from tqdm import tqdm

from .config import FAKE_HEADERS, Settings
from .models import Data, FilePartMeta, Url
from .web import get_bytes

_MIB = 1024 * 1024
_COPY_SIZE = 32 * 1024
_TIMEOUT = 30
_YOUTUBE = "YouTube youtube.com"
_UNSAFE = re.compile(r'[\\/:*?"<>|\r\n\t]')


class _TransferError(Exception):
    """A transfer stopped early; ``written`` bytes reached the file first."""

    def __init__(self, written: int) -> None:
        super().__init__(f"transfer stopped after {written} bytes")
        self.written = written


def progress_bar(total: int) -> tqdm:
    """Return a byte-counting progress bar for ``total`` bytes."""
    return tqdm(
        total=total,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        mininterval=0.01,
        dynamic_ncols=True,
    )


@contextmanager
def _using_bar(bar: tqdm | None, total: int) -> Iterator[tqdm]:
    if bar is not None:
        yield bar
        return
    created = progress_bar(total)
    try:
        yield created
    finally:
        created.close()


def _safe_name(name: str) -> str:
    return _UNSAFE.sub(" ", name).strip()


def _file_path(settings: Settings, name: str, ext: str, escape: bool) -> str:
    file_name = f"{name}.{ext}" if ext else name
    if escape:
        file_name = _safe_name(file_name)
    if settings.output_path:
        os.makedirs(settings.output_path, exist_ok=True)
        return os.path.join(settings.output_path, file_name)
    return file_name


def _file_size(path: str) -> tuple[int, bool]:
    try:
        return os.stat(path).st_size, True
    except FileNotFoundError:
        return 0, False


def _as_f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _request_headers(extra: dict[str, str]) -> dict[str, str]:
    headers = dict(FAKE_HEADERS)
    # Byte ranges must refer to the stored bytes, so ask for them uncompressed.
    headers["Accept-Encoding"] = "identity"
    headers.update({k: v for k, v in extra.items() if v})
    return headers


def _transfer(url: str, fh: BinaryIO, headers: dict[str, str], bar: tqdm) -> int:
    written = 0
    try:
        with requests.get(
            url, headers=_request_headers(headers), stream=True, timeout=_TIMEOUT
        ) as response:
            response.raise_for_status()
            for chunk in response.iter_content(_COPY_SIZE):
                fh.write(chunk)
                bar.update(len(chunk))
                written += len(chunk)
    except (requests.RequestException, OSError) as exc:
        raise _TransferError(written) from exc
    return written


def _fetch(
    url: str,
    fh: BinaryIO,
    referer: str,
    bar: tqdm,
    retry_times: int,
    first: int,
    last: int | None,
    pause: bool = True,
) -> None:
    """Copy bytes ``first``..``last`` of ``url`` into ``fh``, resuming on failure."""
    position = first
    for attempt in itertools.count(1):
        headers = {"Referer": referer}
        if position > 0 or last is not None:
            headers["Range"] = f"bytes={position}-{'' if last is None else last}"
        try:
            _transfer(url, fh, headers, bar)
            return
        except _TransferError as err:
            if attempt >= retry_times:
                raise (err.__cause__ or err) from None
            position += err.written
            if pause:
                time.sleep(1)


def _raise_first(futures: list[Future]) -> None:
    for future in futures:
        error = future.exception()
        if error is not None:
            raise error


def save_caption(
    url: str, referer: str, file_name: str, ext: str, settings: Settings
) -> str | None:
    """Save a caption file when captions are wanted; return its path."""
    if not settings.caption or settings.info_only:
        return None
    print("\nDownloading captions...")
    body = get_bytes(url, referer)
    path = _file_path(settings, file_name, ext, escape=True)
    with open(path, "wb") as fh:
        fh.write(body)
    return path


def save(
    url_data: Url, referer: str, file_name: str, bar: tqdm | None, settings: Settings
) -> str:
    """Download one URL to ``file_name``, resuming a previous partial download."""
    file_path = _file_path(settings, file_name, url_data.ext, escape=False)
    size, exists = _file_size(file_path)
    with _using_bar(bar, url_data.size) as progress:
        if exists and size == url_data.size:
            progress.update(size)
            return file_path
        temp_path = file_path + ".download"
        temp_size, _ = _file_size(temp_path)
        if temp_size > 0:
            progress.update(temp_size)
        with open(temp_path, "ab" if temp_size > 0 else "wb") as fh:
            if settings.chunk_size_mb > 0:
                chunk = settings.chunk_size_mb * _MIB
                for start in range(temp_size, url_data.size, chunk):
                    _fetch(
                        url_data.url, fh, referer, progress,
                        settings.retry_times, start, start + chunk - 1,
                    )
            else:
                _fetch(
                    url_data.url, fh, referer, progress,
                    settings.retry_times, temp_size, None,
                )
        os.replace(temp_path, file_path)
    return file_path


def _plan_parts(
    file_path: str, file_name: str, url_data: Url, threads: int
) -> tuple[list[FilePartMeta], list[FilePartMeta], int]:
    """Return all parts, the unfinished ones, and the bytes already saved."""
    found = read_parts(file_path, file_name, url_data.ext)
    parts: list[FilePartMeta] = []
    unfinished: list[FilePartMeta] = []
    saved = 0
    if found:
        last_end = -1
        for part in found:
            if part.start - last_end != 1:
                gap = FilePartMeta(
                    _as_f32(part.index - 0.000001), last_end + 1, part.start - 1, last_end + 1
                )
                parts.append(gap)
                unfinished.append(gap)
            if part.cur <= part.end + 1:
                saved += part.cur - part.start
                if part.cur < part.end + 1:
                    unfinished.append(part)
            else:
                # More was saved than the part holds: start it again.
                os.remove(part_path(file_path, part))
                part.cur = part.start
                unfinished.append(part)
            parts.append(part)
            last_end = part.end
        if last_end != url_data.size - 1:
            tail = FilePartMeta(
                _as_f32(parts[-1].index + 1), last_end + 1, url_data.size - 1, last_end + 1
            )
            parts.append(tail)
            unfinished.append(tail)
        return parts, unfinished, saved

    part_size = max(url_data.size // threads, 1)
    start = 0
    for index in itertools.count():
        if start >= url_data.size:
            break
        end = start + part_size - 1
        if end >= url_data.size or index + 1 == threads:
            end = url_data.size - 1
        part = FilePartMeta(float(index), start, end, start)
        parts.append(part)
        unfinished.append(part)
        start = end + 1
    return parts, unfinished, saved


def _fetch_part(
    url: str,
    file_path: str,
    part: FilePartMeta,
    referer: str,
    bar: tqdm,
    settings: Settings,
) -> None:
    if settings.chunk_size_mb <= 0:
        chunk = part.end - part.start + 1
    else:
        chunk = settings.chunk_size_mb * _MIB
    path = part_path(file_path, part)
    fresh = _file_size(path)[0] == 0
    with open(path, "ab") as fh:
        if fresh:
            fh.write(part.pack())
        while part.cur <= part.end:
            end = compute_end(part.cur, chunk, part.end)
            _fetch(url, fh, referer, bar, settings.retry_times, part.cur, end, pause=False)
            part.cur = end + 1


def multi_thread_save(
    url_data: Url, referer: str, file_name: str, bar: tqdm | None, settings: Settings
) -> str:
    """Download one URL in parallel byte ranges, resuming from saved part files."""
    file_path = _file_path(settings, file_name, url_data.ext, escape=False)
    size, exists = _file_size(file_path)
    with _using_bar(bar, url_data.size) as progress:
        if exists and size == url_data.size:
            progress.update(size)
            return file_path
        temp_path = file_path + ".download"
        temp_size, temp_exists = _file_size(temp_path)
        if temp_exists:
            if temp_size == url_data.size:
                progress.update(temp_size)
                os.replace(temp_path, file_path)
                return file_path
            os.remove(temp_path)

        parts, unfinished, saved = _plan_parts(
            file_path, file_name, url_data, settings.thread_number
        )
        if saved > 0:
            progress.update(saved)
            if saved == url_data.size:
                merge_parts(file_path, parts)
                return file_path

        with ThreadPoolExecutor(max_workers=settings.thread_number) as pool:
            futures = [
                pool.submit(_fetch_part, url_data.url, file_path, part, referer, progress, settings)
                for part in unfinished
            ]
        _raise_first(futures)
        merge_parts(file_path, parts)
    return file_path


def part_path(file_path: str, part: FilePartMeta) -> str:
    """Return the path of the file holding ``part``."""
    return f"{file_path}.part{part.index:f}"


def compute_end(start: int, chunk_size: int, maximum: int) -> int:
    """Return the last byte of a chunk starting at ``start``, capped at ``maximum``."""
    return min(start + chunk_size - 1, maximum)


def read_parts(file_path: str, file_name: str, ext: str) -> list[FilePartMeta]:
    """Return the headers of the part files saved for ``file_path``, by index."""
    directory = os.path.dirname(file_path) or "."
    pattern = re.compile(re.escape(f"{file_name}.{ext}.part") + ".+")
    metas = [
        parse_part(entry.path, entry.stat().st_size)
        for entry in os.scandir(directory)
        if entry.is_file() and pattern.search(entry.name)
    ]
    return sorted(metas, key=lambda meta: meta.index)


def parse_part(path: str, file_size: int) -> FilePartMeta:
    """Read a part file's header and work out how far it has got."""
    with open(path, "rb") as fh:
        raw = fh.read(FilePartMeta.SIZE)
    meta = FilePartMeta.unpack(raw)
    meta.cur = meta.start + file_size - FilePartMeta.SIZE
    return meta


def merge_parts(file_path: str, parts: list[FilePartMeta]) -> None:
    """Join the bodies of the part files into ``file_path`` and delete them."""
    temp_path = file_path + ".download"
    with open(temp_path, "wb") as out:
        for part in parts:
            with open(part_path(file_path, part), "rb") as src:
                src.seek(FilePartMeta.SIZE)
                shutil.copyfileobj(src, out)
    os.replace(temp_path, file_path)
    for part in parts:
        os.remove(part_path(file_path, part))


def aria2_payloads(
    data: Data, stream: str, title: str, referer: str, token: str
) -> list[dict]:
    """Return one aria2 ``addUri`` JSON-RPC request per URL of ``stream``."""
    selected = data.streams[stream]
    if not selected.urls:
        return []
    ext = selected.urls[0].ext
    header = [f"Referer: {referer}"]
    return [
        {
            "jsonrpc": "2.0",
            "id": "vidgrab",
            "method": "aria2.addUri",
            "params": [
                f"token:{token}",
                [item.url],
                {"out": f"{title}[{index}].{ext}", "header": header},
            ],
        }
        for index, item in enumerate(selected.urls)
    ]


def download(data: Data, referer: str, settings: Settings) -> list[str]:
    """Download the chosen stream of ``data`` and return the paths written.

    Fragments of a multi-part stream are left as separate numbered files.
    """
    ordered = data.sorted_streams()
    if not ordered:
        raise ValueError("no streams to download")
    title = _safe_name(settings.output_name or data.title)
    stream = settings.stream or ordered[0][0]
    if stream not in data.streams:
        raise ValueError(f"no stream named {stream}")
    selected = data.streams[stream]
    print(data.describe(stream, settings.info_only))
    if settings.info_only:
        return []

    if settings.use_aria2_rpc:
        endpoint = f"{settings.aria2_method}://{settings.aria2_addr}/jsonrpc"
        for payload in aria2_payloads(data, stream, title, referer, settings.aria2_token):
            requests.post(endpoint, json=payload, timeout=_TIMEOUT).close()
        return []

    if not selected.urls:
        raise ValueError(f"stream {stream} has no URLs")
    merged_ext = selected.urls[0].ext if data.site == _YOUTUBE else "mp4"
    merged_path = _file_path(settings, title, merged_ext, escape=False)
    if os.path.exists(merged_path):
        print(f"{merged_path}: file already exists, skipping")
        return [merged_path]

    with _using_bar(None, selected.size) as bar:
        if len(selected.urls) == 1:
            first = selected.urls[0]
            if settings.multi_thread:
                return [multi_thread_save(first, referer, title, bar, settings)]
            return [save(first, referer, title, bar, settings)]
        with ThreadPoolExecutor(max_workers=settings.thread_number) as pool:
            futures = [
                pool.submit(save, item, referer, f"{title}[{index}]", bar, settings)
                for index, item in enumerate(selected.urls)
            ]
        _raise_first(futures)
        return [future.result() for future in futures]