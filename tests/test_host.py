"""Tests for wren.host: segment cleaning, path splitting, and QueryParams."""

import pytest

from wren._internal.multimap import MultiValueSource
from wren.host import QueryParams, clean_segment, split_path


class TestCleanSegment:
    def test_lowercases(self) -> None:
        assert clean_segment("Simple") == "simple"

    def test_strips_all_whitespace(self) -> None:
        assert clean_segment(" bi rth\tday ") == "birthday"

    def test_none_and_empty(self) -> None:
        assert clean_segment(None) == ""
        assert clean_segment("") == ""


class TestSplitPath:
    def test_basic(self) -> None:
        assert split_path("/List/Sum") == ["list", "sum"]

    def test_drops_empty_segments(self) -> None:
        assert split_path("//one//simple/time/") == ["one", "simple", "time"]

    def test_strips_mount(self) -> None:
        assert split_path("/virt/one/simple/time", mount="/virt") == ["one", "simple", "time"]

    def test_mount_must_match_whole_segment(self) -> None:
        assert split_path("/virtual/simple/time", mount="virt") == ["virtual", "simple", "time"]

    def test_mount_only(self) -> None:
        assert split_path("/virt", mount="virt") == []

    def test_root(self) -> None:
        assert split_path("/") == []


class TestQueryParams:
    def test_first_value(self) -> None:
        params = QueryParams(b"values=1,2,3&values=4")
        assert params["values"] == "1,2,3"
        assert params.get_list("values") == ["1,2,3", "4"]

    def test_accepts_str(self) -> None:
        params = QueryParams("name=John&age=25")
        assert dict(params) == {"name": "John", "age": "25"}

    def test_blank_values_kept(self) -> None:
        params = QueryParams(b"units=")
        assert "units" in params
        assert params["units"] == ""
        assert params.get("units") == ""

    def test_missing(self) -> None:
        params = QueryParams()
        assert params.get("x", "d") == "d"
        assert params.get_list("x") == []
        assert len(params) == 0

    def test_percent_decoding(self) -> None:
        params = QueryParams(b"msg=exception%20message")
        assert params["msg"] == "exception message"

    def test_satisfies_protocol(self) -> None:
        assert isinstance(QueryParams(), MultiValueSource)
        assert not isinstance({}, MultiValueSource)

    def test_str_outside_latin1(self) -> None:
        params = QueryParams("name=日本&age=3")
        assert params["name"] == "日本"
        assert params["age"] == "3"

    def test_raw_utf8_bytes(self) -> None:
        params = QueryParams("name=José".encode())
        assert params["name"] == "José"

    def test_percent_encoded_utf8(self) -> None:
        params = QueryParams(b"name=Jos%C3%A9")
        assert params["name"] == "José"

    def test_invalid_utf8_is_replaced(self) -> None:
        params = QueryParams(b"name=%FF")
        assert params["name"] == "\ufffd"

    def test_is_read_only(self) -> None:
        params = QueryParams(b"a=1")
        with pytest.raises(TypeError):
            params["a"] = "2"  # type: ignore[index]
