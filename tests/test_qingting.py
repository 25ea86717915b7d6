import json

import pytest
import requests
import responses

from vidgrab.config import Settings
from vidgrab.extractors.qingting import (
    audio_file_url,
    channel_audio_info_url,
    channel_id,
    channel_info_url,
    extract,
)
from vidgrab.web import URLParseFailed

CHANNEL_URL = "https://www.qingting.fm/channels/226572"
TITLE = "ViliBili | 这个冬天是个恋爱的季节"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _sized(mocked, url, size):
    mocked.add(
        responses.GET, url, body=b"", headers={"Content-Length": str(size)}
    )


def _programs(*names):
    return json.dumps(
        {
            "code": 0,
            "total": len(names),
            "data": [
                {"file_path": f"audio/{i}.m4a", "name": name, "id": i}
                for i, name in enumerate(names)
            ],
        }
    )


def test_urls():
    assert channel_id(CHANNEL_URL) == "226572"
    assert channel_info_url("226572") == "http://i.qingting.fm/wapi/channels/226572"
    assert (
        channel_audio_info_url("226572")
        == "http://i.qingting.fm/wapi/channels/226572/programs/page/1/pagesize/250"
    )
    assert audio_file_url("a/b.m4a") == "http://od.qingting.fm/a/b.m4a"


def test_playlist(mocked):
    mocked.add(
        responses.GET,
        channel_info_url("226572"),
        body=json.dumps({"code": 0, "data": {"program_count": 2, "name": "channel"}}),
    )
    mocked.add(
        responses.GET, channel_audio_info_url("226572"), body=_programs(TITLE, "second")
    )
    _sized(mocked, "http://od.qingting.fm/audio/0.m4a", 100)
    _sized(mocked, "http://od.qingting.fm/audio/1.m4a", 200)

    data = extract(CHANNEL_URL, Settings(playlist=True, thread_number=9))

    assert [d.title for d in data] == [TITLE, "second"]
    assert data[0].streams["default"].size == 100
    assert data[1].streams["default"].urls[0].url == "http://od.qingting.fm/audio/1.m4a"
    assert data[1].streams["default"].urls[0].ext == "m4a"
    assert all(d.site == "qingting fm" and d.url == CHANNEL_URL for d in data)


def test_item_selection(mocked):
    mocked.add(responses.GET, channel_info_url("226572"), body="{}")
    mocked.add(
        responses.GET, channel_audio_info_url("226572"), body=_programs("a", "b", "c")
    )
    _sized(mocked, "http://od.qingting.fm/audio/1.m4a", 5)

    data = extract(CHANNEL_URL, Settings(items="2"))

    assert [d.title for d in data] == ["b"]


def test_unreachable_audio_gives_empty_data(mocked):
    mocked.add(responses.GET, channel_info_url("226572"), body="{}")
    mocked.add(responses.GET, channel_audio_info_url("226572"), body=_programs("a"))
    mocked.add(
        responses.GET,
        "http://od.qingting.fm/audio/0.m4a",
        body=requests.ConnectionError("down"),
    )

    data = extract(CHANNEL_URL)

    assert len(data) == 1
    assert isinstance(data[0].error, URLParseFailed)
    assert data[0].url == CHANNEL_URL
    assert data[0].streams == {}


def test_unreachable_channel(mocked):
    mocked.add(
        responses.GET, channel_info_url("226572"), body=requests.ConnectionError("down")
    )
    with pytest.raises(URLParseFailed):
        extract(CHANNEL_URL)