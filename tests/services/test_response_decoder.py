import pytest

from apicrawl.exceptions import DecodeError
from apicrawl.services.response_decoder import ResponseDecoder


@pytest.mark.parametrize("content_type", [
    "application/json",
    "application/json; charset=utf-8",
    "application/hal+json",
    "Application/JSON",
])
def test_json_content_types(content_type):
    assert ResponseDecoder().is_json(content_type)


@pytest.mark.parametrize("content_type", [None, "", "text/html", "application/xml", "application/vnd.api+json"])
def test_non_json_content_types(content_type):
    assert not ResponseDecoder().is_json(content_type)


def test_decode_returns_json_value():
    assert ResponseDecoder().decode('{"a": [1, 2]}') == {"a": [1, 2]}


def test_decode_invalid_json_raises_decode_error():
    with pytest.raises(DecodeError):
        ResponseDecoder().decode("<html>")
