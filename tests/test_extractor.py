import sys

import pytest

from globalip_memo.errors import ErrorKind, GlobalIpError
from globalip_memo.extractor import capture_ip, extract_candidate, flatten, select_field

IPV4_PATTERN = r"(?P<ip>\d{1,3}(?:\.\d{1,3}){3})"


def test_flatten_keeps_only_leaves() -> None:
    document = {
        "hoge": {
            "foo": {
                "arr": ["0", "1"],
                "obj": {"key": "value"},
                "num": 0,
                "boolean": False,
                "null": None,
            }
        }
    }
    flat = flatten(document)
    assert flat == {
        "hoge.foo.arr[0]": "0",
        "hoge.foo.arr[1]": "1",
        "hoge.foo.obj.key": "value",
        "hoge.foo.num": 0,
        "hoge.foo.boolean": False,
        "hoge.foo.null": None,
    }


def test_select_field_returns_string_leaf() -> None:
    body = '{"data": {"addresses": [{"ip": "198.51.100.7"}]}}'
    assert select_field(body, "data.addresses[0].ip") == "198.51.100.7"


@pytest.mark.parametrize("path", ["missing", "count", "flag", "nothing", "data"])
def test_select_field_rejects_missing_or_non_text_leaf(path: str) -> None:
    body = '{"count": 1, "flag": true, "nothing": null, "data": {"ip": "1.2.3.4"}}'
    with pytest.raises(GlobalIpError) as excinfo:
        select_field(body, path)
    assert excinfo.value.kind is ErrorKind.FIELD_NOT_FOUND


def test_select_field_rejects_invalid_json() -> None:
    with pytest.raises(GlobalIpError) as excinfo:
        select_field("<html>1.2.3.4</html>", "ip")
    assert excinfo.value.kind is ErrorKind.INVALID_DOCUMENT
    assert excinfo.value.causes()


@pytest.mark.parametrize(
    "body",
    ["[" * 100000, "[" * (sys.getrecursionlimit() * 2) + "]" * (sys.getrecursionlimit() * 2)],
)
def test_select_field_rejects_deeply_nested_document(body: str) -> None:
    with pytest.raises(GlobalIpError) as excinfo:
        select_field(body, "ip")
    assert excinfo.value.kind is ErrorKind.INVALID_DOCUMENT


def test_capture_ip_uses_named_group() -> None:
    assert capture_ip("ip: 1.2.3.4 end", IPV4_PATTERN) == "1.2.3.4"


def test_capture_ip_without_pattern_returns_text() -> None:
    assert capture_ip(" 1.2.3.4\n", "") == " 1.2.3.4\n"


def test_capture_ip_no_match() -> None:
    with pytest.raises(GlobalIpError) as excinfo:
        capture_ip("no address here", IPV4_PATTERN)
    assert excinfo.value.kind is ErrorKind.CAPTURE_ABSENT


def test_capture_ip_requires_ip_group() -> None:
    with pytest.raises(GlobalIpError) as excinfo:
        capture_ip("ip: 1.2.3.4", r"(?P<addr>\d+\.\d+\.\d+\.\d+)")
    assert excinfo.value.kind is ErrorKind.CAPTURE_ABSENT


def test_capture_ip_optional_group_unmatched() -> None:
    with pytest.raises(GlobalIpError) as excinfo:
        capture_ip("address unknown", r"address (?P<ip>\d+\.\d+\.\d+\.\d+)?")
    assert excinfo.value.kind is ErrorKind.CAPTURE_ABSENT


def test_capture_ip_invalid_pattern() -> None:
    with pytest.raises(GlobalIpError) as excinfo:
        capture_ip("1.2.3.4", r"(?P<ip>[0-9")
    assert excinfo.value.kind is ErrorKind.PATTERN_INVALID


def test_extract_candidate_combines_field_and_pattern() -> None:
    body = '{"result": {"text": "Current IP Address: 203.0.113.9"}}'
    assert extract_candidate(body, field_path="result.text", pattern=IPV4_PATTERN) == "203.0.113.9"


def test_extract_candidate_plain_body() -> None:
    assert extract_candidate("203.0.113.9\n") == "203.0.113.9\n"
