import ast
import textwrap

from routegen.config.settings import NamingConfig
from routegen.extractors.chain import extract_routes_from_function, find_routes_function


def _routes(src: str, naming: NamingConfig | None = None):
    tree = ast.parse(textwrap.dedent(src))
    func = find_routes_function(tree)
    assert func is not None
    return extract_routes_from_function(func, naming or NamingConfig())


def test_prefix_applies_to_following_adds():
    routes = _routes(
        """
        def routes():
            return (
                Routes.new()
                .prefix("/v1")
                .add("/widgets", get(list_widgets))
                .add("/widgets/{id}", post(update_widget))
            )
        """
    )
    assert [(r.method, r.path, r.handler) for r in routes] == [
        ("GET", "/v1/widgets", "list_widgets"),
        ("POST", "/v1/widgets/{id}", "update_widget"),
    ]
    assert routes[0].name == "get_v1_widgets"
    assert routes[1].name == "post_v1_widgets_id"


def test_prefix_only_affects_later_calls_in_chain():
    routes = _routes(
        """
        def routes():
            return Routes.new().add("/a", get(a)).prefix("v2").add("/b", get(b))
        """
    )
    assert [r.path for r in routes] == ["/a", "/v2/b"]


def test_new_chain_resets_prefix():
    routes = _routes(
        """
        def routes():
            Routes.new().prefix("/admin").add("/users", get(list_admin_users))
            return Routes().add("/health", get(health))
        """
    )
    assert [r.path for r in routes] == ["/admin/users", "/health"]


def test_dotted_builder_constructors_reset_prefix():
    routes = _routes(
        """
        def routes():
            Routes.new().prefix("/admin").add("/users", get(a))
            routing.Routes.new().add("/health", get(b))
            routing.Routes().prefix("/v2").add("/items", get(c))
            return api.routing.Routes().add("/ping", get(d))
        """
    )
    assert [r.path for r in routes] == ["/admin/users", "/health", "/v2/items", "/ping"]


def test_prefix_persists_across_statements_on_same_builder():
    routes = _routes(
        """
        def routes():
            r = Routes.new()
            r.prefix("/api")
            r.add("/users", get(list_users))
            return r
        """
    )
    assert [r.path for r in routes] == ["/api/users"]


def test_mismatched_add_is_skipped_but_siblings_survive():
    routes = _routes(
        """
        def routes():
            return (
                Routes.new()
                .add(USERS_PATH, get(list_users))
                .add("/lambda", get(lambda: None))
                .add("/bare", list_users)
                .add("/two", get(a, b))
                .add("/ok", get(ok))
            )
        """
    )
    assert [r.path for r in routes] == ["/ok"]


def test_unknown_combinators_are_traversed():
    routes = _routes(
        """
        def routes():
            return (
                Routes.new()
                .prefix("/api")
                .layer(auth_layer)
                .add("/me", routing.get(handlers.current_user))
                .with_state(state)
            )
        """
    )
    assert len(routes) == 1
    assert routes[0].path == "/api/me"
    assert routes[0].method == "GET"
    assert routes[0].handler == "current_user"


def test_no_recognized_routes_returns_none():
    assert _routes("def routes():\n    return Routes.new()\n") is None


def test_find_routes_function_respects_name():
    tree = ast.parse("def urls():\n    pass\n")
    assert find_routes_function(tree) is None
    assert find_routes_function(tree, "urls") is not None


def test_prefix_strip_for_naming_is_independent_of_path():
    routes = _routes(
        """
        def routes():
            return Routes.new().prefix("/api").add("/users", get(list_users))
        """,
        NamingConfig(path_prefix_to_remove="/api"),
    )
    assert routes[0].path == "/api/users"
    assert routes[0].name == "get_users"
