import json

import pytest
import responses

from vidgrab.config import Settings
from vidgrab.extractors.douyu import extract
from vidgrab.web import ExtractError, URLParseFailed

PAGE_URL = "https://v.douyu.com/show/l0Q8mMY3wZqv49Ad"
TITLE = "每日撸报_每日撸报：有些人死了其实它还可以把你带走_斗鱼视频 - 最6的弹幕视频网站"
INFO_URL = "http://vmobile.douyu.com/video/getInfo?vid=l0Q8mMY3wZqv49Ad"
PLAYLIST = "https://vod.example.com/video/playlist.m3u8"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def add_size(rsps, url, size):
    rsps.add(responses.GET, url, body=b"", headers={"Content-Length": str(size)})


def test_normal(mocked):
    mocked.add(responses.GET, PAGE_URL, body=f"<html><title>{TITLE}</title></html>")
    mocked.add(
        responses.GET,
        INFO_URL,
        body=json.dumps({"error": 0, "data": {"video_url": PLAYLIST}}),
    )
    mocked.add(
        responses.GET,
        PLAYLIST,
        body="#EXTM3U\n#EXTINF:10,\nseg0.ts\n#EXTINF:10,\nseg1.ts\n#EXT-X-ENDLIST\n",
    )
    add_size(mocked, "https://vod.example.com/video/seg0.ts", 5000000)
    add_size(mocked, "https://vod.example.com/video/seg1.ts", 5558080)

    data = extract(PAGE_URL, Settings(info_only=True))

    item = data[0]
    assert item.title == TITLE
    assert item.site == "斗鱼 douyu.com"
    stream = item.streams["default"]
    assert stream.size == 10558080
    assert [u.url for u in stream.urls] == [
        "https://vod.example.com/video/seg0.ts",
        "https://vod.example.com/video/seg1.ts",
    ]
    assert {u.ext for u in stream.urls} == {"ts"}


def test_live_room_not_supported():
    with pytest.raises(ExtractError, match="暂不支持斗鱼直播"):
        extract("https://www.douyu.com/9999")


def test_missing_title_raises(mocked):
    mocked.add(responses.GET, PAGE_URL, body="<html></html>")

    with pytest.raises(URLParseFailed):
        extract(PAGE_URL)


def test_unknown_url_shape_raises(mocked):
    other = "https://v.douyu.com/other"
    mocked.add(responses.GET, other, body="<title>t</title>")

    with pytest.raises(URLParseFailed):
        extract(other)