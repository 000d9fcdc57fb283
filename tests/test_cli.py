"""Tests for pathrule.cli — entrypoint, router resolution and subcommands."""

import sys
import types

import pytest

from pathrule.cli import main
from pathrule.cli._resolve import resolve_router
from pathrule.cli._routes import describe_target
from pathrule.routing.router import Router

MODULE = "_fake_pathrule_urls"


class BlogController:
    pass


def _build_router() -> Router:
    router = Router()
    router.get("user/<id>", "Index@read", name="user.read").pattern(id="int")
    router.post("blog/<slug>", (BlogController, "create"))
    router.rule("about", "page/about")
    return router


@pytest.fixture
def _fake_urls_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with pathrule routers on sys.modules."""
    mod = types.ModuleType(MODULE)
    mod.router = _build_router()  # type: ignore[attr-defined]
    mod.custom = _build_router()  # type: ignore[attr-defined]
    mod.make_router = _build_router  # type: ignore[attr-defined]
    mod.empty = Router()  # type: ignore[attr-defined]
    mod.not_a_router = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, MODULE, mod)


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_routes_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "--help"])
        assert exc_info.value.code == 0

    def test_match_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", "--help"])
        assert exc_info.value.code == 0

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "pathrule" in capsys.readouterr().out


class TestCLIMissingArgs:
    def test_routes_missing_router(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes"])
        assert exc_info.value.code == 2

    def test_match_missing_path(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", "x:router", "GET"])
        assert exc_info.value.code == 2


@pytest.mark.usefixtures("_fake_urls_module")
class TestResolveRouter:
    def test_explicit_attribute(self) -> None:
        assert isinstance(resolve_router(f"{MODULE}:custom"), Router)

    def test_default_attribute(self) -> None:
        """Omitting :attr defaults to 'router'."""
        assert isinstance(resolve_router(MODULE), Router)

    def test_factory(self) -> None:
        assert isinstance(resolve_router(f"{MODULE}:make_router"), Router)

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_router("nonexistent_module_xyz:router")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_router(f"{MODULE}:does_not_exist")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match=r"not a pathrule\.Router instance"):
            resolve_router(f"{MODULE}:not_a_router")


class TestDescribeTarget:
    def test_string(self) -> None:
        assert describe_target("Index@read") == "Index@read"

    def test_class_pair(self) -> None:
        assert describe_target((BlogController, "create")) == "BlogController@create"

    def test_function(self) -> None:
        assert describe_target(_build_router) == "_build_router"


@pytest.mark.usefixtures("_fake_urls_module")
class TestRoutesCommand:
    def test_lists_rules(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{MODULE}:router"])
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0].split() == ["METHOD", "RULE", "TARGET", "NAME"]
        assert "user/<id>" in out
        assert "user.read" in out
        assert "BlogController@create" in out
        assert any(line.startswith("POST") for line in lines)
        assert any(line.startswith("*") for line in lines)

    def test_empty_router(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{MODULE}:empty"])
        assert "No rules declared." in capsys.readouterr().out

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", f"{MODULE}:not_a_router"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


@pytest.mark.usefixtures("_fake_urls_module")
class TestMatchCommand:
    def test_method_dispatch(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", f"{MODULE}:router", "GET", "/user/42"])
        out = capsys.readouterr().out
        assert "rule:   user/<id>" in out
        assert "kind:   class_method" in out
        assert "target: Index@read" in out
        assert "var:    id = 42" in out

    def test_query_string(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", f"{MODULE}:router", "GET", "/about?x=1"])
        out = capsys.readouterr().out
        assert "kind:   controller" in out
        assert "target: page/about" in out

    def test_array_callback(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", f"{MODULE}:router", "post", "/blog/hello"])
        out = capsys.readouterr().out
        assert "kind:   array_callback" in out
        assert "target: BlogController@create" in out
        assert "var:    slug = 'hello'" in out

    def test_not_found_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", f"{MODULE}:router", "GET", "/missing"])
        assert exc_info.value.code == 1
        assert "404" in capsys.readouterr().err

    def test_method_not_allowed_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", f"{MODULE}:router", "DELETE", "/user/42"])
        assert exc_info.value.code == 1
        assert "405" in capsys.readouterr().err

    def test_malformed_header(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["match", f"{MODULE}:router", "GET", "/about", "-H", "nocolon"])
        assert exc_info.value.code == 2
