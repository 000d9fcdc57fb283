"""Tests for pathrule.routing.extract — route variable extraction."""

import pytest

from pathrule.routing.extract import (
    coerce,
    extra_params,
    extract_vars,
    parse_url_params,
    strip_tags,
)


def _extract(
    groups: dict[str, str | None],
    rule: str,
    url: str,
    patterns: dict[str, str] | None = None,
    options: dict[str, object] | None = None,
    delimiter: str = "/",
) -> dict[str, object]:
    return extract_vars(
        groups,
        rule=rule,
        url=url,
        patterns=patterns or {},
        options=options or {},
        delimiter=delimiter,
    )


class TestStripTags:
    def test_strips_tags(self) -> None:
        assert strip_tags("<b>bold</b>") == "bold"

    def test_unterminated_tag(self) -> None:
        assert strip_tags("abc<script") == "abc"

    def test_plain(self) -> None:
        assert strip_tags("plain") == "plain"


class TestParseUrlParams:
    def test_pairs(self) -> None:
        assert parse_url_params("page/2/sort/name") == {"page": "2", "sort": "name"}

    def test_values_tag_stripped(self) -> None:
        assert parse_url_params("q/<i>x</i>") == {"q": "x"}

    def test_empty(self) -> None:
        assert parse_url_params("") == {}

    def test_dangling_name(self) -> None:
        assert parse_url_params("page/2/orphan") == {"page": "2"}


class TestExtraParams:
    def test_skips_consumed_segments(self) -> None:
        assert extra_params("user/<id>", "user/42/page/2") == {"page": "2"}

    def test_nothing_left(self) -> None:
        assert extra_params("user/<id>", "user/42") == {}

    def test_custom_delimiter(self) -> None:
        assert extra_params("user/<id>", "user-42-page-2", "-") == {"page": "2"}


class TestCoerce:
    @pytest.mark.parametrize(
        ("value", "pattern", "expected"),
        [
            ("42", "int", 42),
            ("42", r"\d+", 42),
            ("1.5", "float", 1.5),
            ("42", None, "42"),
            ("42", "alpha", "42"),
            ("abc", "int", "abc"),
        ],
    )
    def test_coerce(self, value: str, pattern: str | None, expected: object) -> None:
        assert coerce(value, pattern) == expected

    def test_non_string_untouched(self) -> None:
        assert coerce(7, "int") == 7


class TestExtractVars:
    def test_captured_and_coerced(self) -> None:
        assert _extract({"id": "42"}, "user/<id>", "user/42", {"id": "int"}) == {"id": 42}

    def test_unmatched_optional_dropped(self) -> None:
        assert _extract({"name": None}, "blog/<name?>", "blog") == {}

    def test_extra_params_merged(self) -> None:
        result = _extract({"id": "42"}, "user/<id>", "user/42/page/2", {"id": "int"})
        assert result == {"id": 42, "page": "2"}

    def test_no_extras_when_value_spans_delimiter(self) -> None:
        result = _extract({"path": "docs/intro"}, "files/<path>", "files/docs/intro/a/b")
        assert result == {"path": "docs/intro"}

    def test_defaults_fill_missing(self) -> None:
        result = _extract({"page": None}, "list/<page?>", "list", options={"default": {"page": 1}})
        assert result == {"page": 1}

    def test_captured_beats_default(self) -> None:
        result = _extract(
            {"page": "3"},
            "list/<page?>",
            "list/3",
            {"page": "int"},
            {"default": {"page": 1}},
        )
        assert result == {"page": 3}

    def test_reserved_names_stripped(self) -> None:
        result = _extract({"__module__": "admin", "id": "1"}, "<__module__>/<id>", "admin/1")
        assert result == {"id": "1"}

    def test_fresh_dict(self) -> None:
        groups = {"id": "1"}
        result = _extract(groups, "user/<id>", "user/1")
        result["x"] = 1
        assert groups == {"id": "1"}
