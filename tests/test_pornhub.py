import json

import pytest
import responses

from vidgrab.extractors.pornhub import extract
from vidgrab.web import ExtractError, URLParseFailed

PAGE_URL = "https://www.pornhub.com/view_video.php?viewkey=ph5cb5fc41c6ebd"
TITLE = "Must watch Milf drilled by the fireplace"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _sized(mocked, url, size):
    mocked.add(
        responses.GET, url, body=b"", headers={"Content-Length": str(size)}
    )


def _page(definitions, title=TITLE):
    span = f'<span class="inlineFree">{title}</span>' if title else ""
    return (
        f"<html><body>{span}<script>var flashvars = {{"
        f'"mediaDefinitions":{json.dumps(definitions)},"isVertical":"false"}};'
        "</script></body></html>"
    )


def test_normal_page(mocked):
    definitions = [
        {"format": "mp4", "quality": 720, "videoUrl": "http://cdn.example.com/720.mp4"},
        {"format": "hls", "quality": 480, "videoUrl": "http://cdn.example.com/480.m3u8"},
        {"format": "mp4", "quality": [720, 480, 240], "videoUrl": "http://cdn.example.com/x"},
        {"format": "mp4", "quality": 240, "videoUrl": ""},
    ]
    mocked.add(responses.GET, PAGE_URL, body=_page(definitions))
    _sized(mocked, "http://cdn.example.com/720.mp4", 2048)

    data = extract(PAGE_URL)

    assert len(data) == 1
    item = data[0]
    assert item.title == TITLE
    assert item.site == "Pornhub pornhub.com"
    assert item.type == "video"
    assert list(item.streams) == ["720"]
    stream = item.streams["720"]
    assert stream.quality == "720P"
    assert stream.size == 2048
    assert stream.urls[0].url == "http://cdn.example.com/720.mp4"
    assert stream.urls[0].ext == "mp4"


def test_default_title(mocked):
    definitions = [
        {"format": "mp4", "quality": 480, "videoUrl": "http://cdn.example.com/480.mp4"}
    ]
    mocked.add(responses.GET, PAGE_URL, body=_page(definitions, title=""))
    _sized(mocked, "http://cdn.example.com/480.mp4", 10)

    data = extract(PAGE_URL)

    assert data[0].title == "pornhub video"
    assert data[0].streams["480"].size == 10


def test_missing_definitions(mocked):
    mocked.add(responses.GET, PAGE_URL, body="<html><title>x</title></html>")
    with pytest.raises(URLParseFailed):
        extract(PAGE_URL)


def test_broken_definitions(mocked):
    html = '<script>"mediaDefinitions":{broken,"isVertical":"false"</script>'
    mocked.add(responses.GET, PAGE_URL, body=html)
    with pytest.raises(ExtractError):
        extract(PAGE_URL)