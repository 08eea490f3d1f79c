import textwrap
from pathlib import Path

import pytest

from routegen.config.settings import Config, NamingConfig, TypeScriptConfig
from routegen.domain.models import Diagnostic, HandlerInfo, RouteInfo
from routegen.errors import ControllerScanError, ParseError
from routegen.extractors.controller import extract_routes_from_source
from routegen.orchestrator.pipeline import assemble_routes, run_generate, write_outputs


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


def test_routes_are_joined_with_handler_metadata(widgets_source):
    routes = extract_routes_from_source(widgets_source, NamingConfig())

    by_key = {(r.method, r.path): r for r in routes}
    assert list(by_key) == [
        ("GET", "/v1/widgets"),
        ("GET", "/v1/widgets/{id}"),
        ("POST", "/v1/widgets"),
        ("DELETE", "/v1/widgets/{id}"),
    ]
    create = by_key[("POST", "/v1/widgets")]
    assert create.handler_info.body_param == "WidgetCreate"
    assert create.handler_info.requires_auth is True
    assert create.handler_info.return_type.found_type == "WidgetResponse"


def test_unknown_handler_gets_default_metadata():
    src = """
def routes():
    return Routes.new().add("/elsewhere", get(imported_handler))
"""
    routes = extract_routes_from_source(src, NamingConfig())
    assert len(routes) == 1
    assert routes[0].handler_info == HandlerInfo()


def test_module_without_routes_function_has_no_routes():
    assert extract_routes_from_source("def helper():\n    pass\n", NamingConfig()) == []


def test_syntax_error_raises_parse_error():
    with pytest.raises(ParseError) as exc:
        extract_routes_from_source("def routes(:\n", NamingConfig(), file_path="bad.py")
    assert exc.value.file_path == "bad.py"


def test_assemble_drops_later_duplicate_and_names_both_handlers():
    first = RouteInfo(name="get_users", path="/users", method="GET", handler="list_users")
    dup = RouteInfo(name="get_users", path="/users", method="GET", handler="list_users_v2")
    other = RouteInfo(name="post_users", path="/users", method="POST", handler="create_user")

    diagnostics: list[Diagnostic] = []
    routes = assemble_routes([("a.py", [first, other]), ("b.py", [dup])], diagnostics)

    assert routes == [first, other]
    assert len(diagnostics) == 1
    assert diagnostics[0].kind == "duplicate_route"
    assert diagnostics[0].file_path == "b.py"
    assert "list_users_v2" in diagnostics[0].message
    assert "'list_users'" in diagnostics[0].message


def test_end_to_end_duplicate_widget_route(tmp_path: Path):
    controllers = tmp_path / "controllers"
    write(
        controllers / "widgets.py",
        """
        def routes():
            return (
                Routes.new()
                .prefix("/v1")
                .add("/widgets/{id}", get(get_widget))
                .add("/widgets/{id}", get(get_widget_dup))
            )

        def get_widget(id: str) -> Widget:
            ...

        def get_widget_dup(id: str) -> Widget:
            ...
        """,
    )

    result = run_generate(Config(controllers_path=controllers))

    assert len(result.routes) == 1
    route = result.routes[0]
    assert route.name == "get_v1_widgets_id"
    assert route.path == "/v1/widgets/{id}"
    assert route.handler == "get_widget"

    dupes = [d for d in result.diagnostics if d.kind == "duplicate_route"]
    assert len(dupes) == 1
    assert "get_widget_dup" in dupes[0].message

    assert "class GetV1WidgetsId(Link):" in result.links_code
    assert "    id: str" in result.links_code


def test_duplicates_across_modules_keep_first_file(tmp_path: Path):
    controllers = tmp_path / "controllers"
    write(controllers / "a_users.py", 'def routes():\n    return Routes.new().add("/users", get(a))\n')
    write(controllers / "b_users.py", 'def routes():\n    return Routes.new().add("/users", get(b))\n')

    result = run_generate(Config(controllers_path=controllers))

    assert [r.handler for r in result.routes] == ["a"]
    assert result.diagnostics[0].file_path.endswith("b_users.py")


def test_parse_errors_are_skipped_unless_strict(controllers_dir: Path):
    write(controllers_dir / "broken.py", "def routes(:\n")

    result = run_generate(Config(controllers_path=controllers_dir))
    assert len(result.routes) == 4
    errors = [d for d in result.diagnostics if d.kind == "parse_error"]
    assert len(errors) == 1
    assert errors[0].file_path.endswith("broken.py")

    with pytest.raises(ParseError):
        run_generate(Config(controllers_path=controllers_dir, strict=True))


def test_missing_controllers_dir_is_fatal(tmp_path: Path):
    with pytest.raises(ControllerScanError):
        run_generate(Config(controllers_path=tmp_path / "nope"))


def test_typescript_skipped_without_output_dir(controllers_dir: Path):
    config = Config(
        controllers_path=controllers_dir,
        typescript=TypeScriptConfig(generate_client=True),
    )
    result = run_generate(config)
    assert result.client_code is None
    assert result.hooks_code is None
    assert result.typescript_generated is False
    assert "class Link:" in result.links_code


def test_write_outputs(controllers_dir: Path, tmp_path: Path):
    config = Config(
        controllers_path=controllers_dir,
        links_output_path=tmp_path / "out" / "links.py",
        typescript=TypeScriptConfig(output_path=tmp_path / "web" / "api", generate_client=True),
    )
    result = run_generate(config)
    written = write_outputs(result, config)

    assert [p.name for p in written] == ["links.py", "client.ts", "api.ts"]
    assert (tmp_path / "web" / "api" / "client.ts").read_text(encoding="utf-8") == result.client_code
    assert "export const client = {" in result.client_code
    assert "export function useGetV1Widgets(" in result.hooks_code
