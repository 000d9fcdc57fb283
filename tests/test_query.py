"""Tests for pathrule.http.query — immutable query string parameters."""

from pathrule.http.query import QueryParams


class TestQueryParams:
    def test_from_str(self) -> None:
        q = QueryParams("page=2&sort=name")
        assert q["page"] == "2"
        assert q["sort"] == "name"

    def test_from_bytes(self) -> None:
        assert QueryParams(b"a=1")["a"] == "1"

    def test_leading_question_mark(self) -> None:
        assert QueryParams("?a=1")["a"] == "1"

    def test_blank_values_kept(self) -> None:
        q = QueryParams("flag=&x=1")
        assert "flag" in q
        assert q["flag"] == ""

    def test_repeated_name_first_value(self) -> None:
        assert QueryParams("tag=a&tag=b")["tag"] == "a"

    def test_get_default(self) -> None:
        assert QueryParams("").get("x", "d") == "d"

    def test_len_and_iter(self) -> None:
        q = QueryParams("a=1&b=2&a=3")
        assert len(q) == 2
        assert sorted(q) == ["a", "b"]

    def test_repr(self) -> None:
        assert repr(QueryParams("a=1")) == "QueryParams('a=1')"
