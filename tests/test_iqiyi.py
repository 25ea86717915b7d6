import json
import string
from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from vidgrab.extractors import iqiyi
from vidgrab.web import ExtractError, URLParseFailed

VPS = "http://cache.video.qiyi.com/vps"
DU = "https://data.example.com/videos"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _register(mocked, page_url, html, vsize, scrsz, code="A00000", msg=""):
    mocked.add(responses.GET, page_url, body=html)
    first = vsize - 1000
    vps = {
        "code": code,
        "msg": msg,
        "data": {
            "vp": {
                "du": DU,
                "tkl": [
                    {
                        "vs": [
                            {
                                "bid": 4,
                                "scrsz": scrsz,
                                "vsize": vsize,
                                "fs": [{"l": "/frag1", "b": first}, {"l": "/frag2", "b": 1000}],
                            },
                            {
                                "bid": 2,
                                "scrsz": "640x360",
                                "vsize": 500,
                                "fs": [{"l": "/frag3", "b": 500}],
                            },
                        ]
                    }
                ],
            }
        },
    }
    mocked.add(responses.GET, VPS, json=vps)
    for name in ("frag1", "frag2", "frag3"):
        mocked.add(
            responses.GET,
            f"{DU}/{name}",
            json={"l": f"https://media.example.com/v/{name}.f4v?key=1"},
        )


def _vps_query(mocked):
    call = next(c for c in mocked.calls if "/vps" in c.request.url)
    return parse_qs(urlsplit(call.request.url).query)


def test_normal(mocked):
    url = "http://www.iqiyi.com/v_19rrbdmaj0.html"
    html = (
        "<html><head><title>新一轮降水将至 冷空气影响中东部地区-资讯-高清正版视频在线观看–爱奇艺</title></head>"
        '<body><div data-player-tvid="1001" data-player-videoid="abc123"></div></body></html>'
    )
    _register(mocked, url, html, 2952228, "896x504")
    data = iqiyi.extract(url)[0]
    assert data.title == "新一轮降水将至 冷空气影响中东部地区-资讯-高清正版视频在线观看–爱奇艺"
    name, stream = data.sorted_streams()[0]
    assert name == "4"
    assert stream.size == 2952228
    assert stream.quality == "896x504"
    assert [u.ext for u in stream.urls] == ["f4v", "f4v"]
    assert stream.urls[0].url == "https://media.example.com/v/frag1.f4v?key=1"
    assert set(data.streams) == {"4", "2"}
    query = _vps_query(mocked)
    assert query["tvid"] == ["1001"]
    assert query["vid"] == ["abc123"]


def test_title_from_heading(mocked):
    url = "http://www.iqiyi.com/v_19rqy2z83w.html"
    html = (
        "<html><head><title>ignored</title></head><body>"
        "<h1><a>收了创意视频2018</a><span>：58天环球飞行记</span></h1>"
        "<script>param['tvid'] = \"2002\"; param['vid'] = \"def456\";</script>"
        "</body></html>"
    )
    _register(mocked, url, html, 76186786, "1920x1080")
    data = iqiyi.extract(url)[0]
    assert data.title == "收了创意视频2018：58天环球飞行记"
    stream = data.sorted_streams()[0][1]
    assert stream.size == 76186786
    assert stream.quality == "1920x1080"
    query = _vps_query(mocked)
    assert query["tvid"] == ["2002"]
    assert query["vid"] == ["def456"]


def test_curid(mocked):
    url = "https://www.iqiyi.com/v_19rro0jdls.html#curid=350289100_6e6601aae889d0b1004586a52027c321"
    html = "<html><head><title>Shawn Mendes - Never Be Alone</title></head><body></body></html>"
    _register(mocked, "https://www.iqiyi.com/v_19rro0jdls.html", html, 79921894, "1920x800")
    data = iqiyi.extract(url)[0]
    assert data.title == "Shawn Mendes - Never Be Alone"
    stream = data.sorted_streams()[0][1]
    assert stream.size == 79921894
    assert stream.quality == "1920x800"
    query = _vps_query(mocked)
    assert query["tvid"] == ["350289100"]
    assert query["vid"] == ["6e6601aae889d0b1004586a52027c321"]


def test_unplayable(mocked):
    url = "http://www.iqiyi.com/v_blocked.html"
    html = '<html><head><title>x</title></head><body>"tvid":"5" "vid":"v5"</body></html>'
    _register(mocked, url, html, 100, "1x1", code="A00001", msg="forbidden")
    with pytest.raises(ExtractError, match="can't play this video: forbidden"):
        iqiyi.extract(url)


def test_missing_ids(mocked):
    url = "http://www.iqiyi.com/v_none.html"
    mocked.add(responses.GET, url, body="<html><title>nothing</title></html>")
    with pytest.raises(URLParseFailed):
        iqiyi.extract(url)


def test_mac_id_shape():
    value = iqiyi.mac_id()
    assert len(value) == 32
    assert set(value) <= set(string.ascii_lowercase + string.digits)


def test_vf_is_md5_hex_and_deterministic():
    first = iqiyi.vf("/vps?tvid=1&vid=2")
    assert len(first) == 32
    assert set(first) <= set("0123456789abcdef")
    assert first == iqiyi.vf("/vps?tvid=1&vid=2")
    assert first != iqiyi.vf("/vps?tvid=1&vid=3")


def test_fragment_response_must_be_json(mocked):
    url = "http://www.iqiyi.com/v_badfrag.html"
    mocked.add(responses.GET, url, body='"tvid":"7" "vid":"v7"')
    vps = {
        "code": "A00000",
        "data": {"vp": {"du": DU, "tkl": [{"vs": [{"bid": 1, "fs": [{"l": "/bad", "b": 1}]}]}]}},
    }
    mocked.add(responses.GET, VPS, body=json.dumps(vps))
    mocked.add(responses.GET, f"{DU}/bad", body="not json")
    with pytest.raises(ExtractError):
        iqiyi.extract(url)