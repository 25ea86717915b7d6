# vidgrab

vidgrab is a library that finds the real media addresses behind a page on a
video, picture or audio site and downloads them, resuming interrupted
transfers.

## Supported sites

| Site | Module |
| --- | --- |
| 半次元 bcy.net | `vidgrab.extractors.bcy` |
| 抖音 douyin.com | `vidgrab.extractors.douyin` |
| 斗鱼 douyu.com (recorded videos only) | `vidgrab.extractors.douyu` |
| Facebook | `vidgrab.extractors.facebook` |
| 极客时间 geekbang.org | `vidgrab.extractors.geekbang` |
| Instagram | `vidgrab.extractors.instagram` |
| 爱奇艺 iqiyi.com | `vidgrab.extractors.iqiyi` |
| 芒果TV mgtv.com | `vidgrab.extractors.mgtv` |
| 秒拍 miaopai.com | `vidgrab.extractors.miaopai` |
| 网易云音乐 music.163.com (MVs and videos) | `vidgrab.extractors.netease` |
| Pornhub | `vidgrab.extractors.pornhub` |
| 蜻蜓FM qingting.fm (channels) | `vidgrab.extractors.qingting` |
| 腾讯视频 v.qq.com | `vidgrab.extractors.qq` |

## Usage

Every extractor module has one entry point, `extract(url, settings=None)`.
It returns a list of `vidgrab.models.Data` records, one per item found on
the page. Each record holds `site`, `title`, `type`, `url` and a dict of
named `Stream`s; a stream has its `urls` (each a `Url` with `url`, `size`
and `ext`), a `quality` label and a total `size`.

```python
from vidgrab.config import Settings
from vidgrab.downloader import download
from vidgrab.extractors import douyin

settings = Settings(output_path="videos")
page = "https://www.douyin.com/share/video/6557825773007277319/"

for data in douyin.extract(page, settings):
    for name, stream in data.sorted_streams():
        print(name, stream.total_size())
    paths = download(data, page, settings)
    print(paths)
```

`Data.sorted_streams()` returns `(name, stream)` pairs, largest first.
`download` takes the stream named by `Settings.stream`, or the largest one,
prints a summary of the item (`Data.describe`) and returns the paths it
wrote. With `info_only=True` it prints every stream and downloads nothing.

### Settings

`vidgrab.config.Settings` is a dataclass. The fields the package acts on:

| Field | Default | Effect |
| --- | --- | --- |
| `stream` | `""` | name of the stream to download |
| `output_path` | `""` | directory for the files (created if missing) |
| `output_name` | `""` | file name to use instead of the title |
| `info_only` | `False` | only print what is available |
| `caption` | `False` | let `save_caption` write caption files |
| `chunk_size_mb` | `0` | fetch files range by range in chunks of this size |
| `retry_times` | `10` | attempts per range before giving up |
| `thread_number` | `10` | worker threads; must be at least 1 |
| `multi_thread` | `False` | split a single file into parallel byte ranges |
| `use_aria2_rpc` | `False` | hand the addresses to aria2 instead |
| `aria2_token`, `aria2_addr`, `aria2_method` | `""`, `"localhost:6800"`, `"http"` | aria2 JSON-RPC endpoint |
| `items`, `item_start`, `item_end` | `""`, `1`, `0` | which items of a list to fetch |

### What the downloader does

- A file that already has the expected size is skipped, as is a finished
  target file already present on disk.
- Partial downloads are kept as `<name>.download` and resumed with an HTTP
  range request on the next run.
- A failed transfer is resumed from where it stopped, up to `retry_times`
  attempts.
- In multi-thread mode a single file is split into parts saved as
  `<file>.part<index>`, each starting with a small header
  (`FilePartMeta`); interrupted parts are picked up again and the parts are
  joined into the final file once all are complete.
- Streams made of several fragments have their fragments fetched side by
  side and saved as `<title>[0].<ext>`, `<title>[1].<ext>` and so on.
- With `use_aria2_rpc`, one `aria2.addUri` request per address is posted to
  the aria2 daemon; `aria2_payloads` builds these requests.

### Lists of items

`Settings.selected_items(total)` returns the 1-based positions to fetch:
either from `items` (such as `"1,5,6,8-10"`) or from the range
`item_start`..`item_end`, where an `item_end` of 0 means the last item. The
qingting extractor uses it to pick programs from a channel; a program whose
audio cannot be reached comes back as a record with its `error` set.

### Errors

Pages that cannot be understood raise `vidgrab.web.URLParseFailed`; every
extraction error derives from `vidgrab.web.ExtractError`. Network errors
from `requests` are passed on unchanged. `download` raises `ValueError` for
an unknown stream name or a record without streams.

## What it does not do

- There is no command-line program; vidgrab is used from Python.
- Fragments of a multi-part stream are not joined into one video file; they
  stay as separate numbered files.
- Live streams are not supported.