from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Iterable, Optional

from routegen.config.settings import NamingConfig
from routegen.domain.models import RouteInfo
from routegen.naming.rules import generate_route_name
from routegen.utils.paths import build_full_path

AnyFunctionDef = ast.FunctionDef | ast.AsyncFunctionDef


@dataclass
class _ChainState:
    prefix: str = ""


def find_routes_function(tree: ast.Module, name: str = "routes") -> Optional[AnyFunctionDef]:
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name == name:
            return node
    return None


def extract_routes_from_function(
    func: AnyFunctionDef, naming: NamingConfig
) -> Optional[list[RouteInfo]]:
    """
    Interpret the builder chain(s) in a routes() function:

        return (
            Routes.new()
            .prefix("/v1")
            .add("/widgets/{id}", get(get_widget))
        )

    Returns routes in declaration order (handler_info left at its default),
    or None when the function declares nothing we recognize.
    """
    routes: list[RouteInfo] = []
    state = _ChainState()

    for expr in _statement_exprs(func.body):
        _interpret(expr, routes, state, naming)

    return routes or None


def _statement_exprs(body: Iterable[ast.stmt]) -> Iterable[ast.expr]:
    for stmt in body:
        if isinstance(stmt, (ast.Return, ast.Expr)) and stmt.value is not None:
            yield stmt.value
        elif isinstance(stmt, (ast.Assign, ast.AnnAssign)) and stmt.value is not None:
            yield stmt.value


def _interpret(
    expr: ast.expr, routes: list[RouteInfo], state: _ChainState, naming: NamingConfig
) -> None:
    if not isinstance(expr, ast.Call):
        return

    func = expr.func

    # Routes() / Routes.new() / routing.Routes() / routing.Routes.new(): a fresh chain
    if isinstance(func, ast.Name) or (
        isinstance(func, ast.Attribute)
        and _is_dotted_name(func.value)
        and (func.attr == "new" or func.attr[:1].isupper())
    ):
        state.prefix = ""
        return

    if not isinstance(func, ast.Attribute):
        return

    # receiver first: earlier calls in the chain set up the prefix
    _interpret(func.value, routes, state, naming)

    if func.attr == "prefix":
        value = _const_str(expr.args[0]) if expr.args else None
        if value is not None:
            state.prefix = value if value.startswith("/") else "/" + value
    elif func.attr == "add":
        route = _parse_add_call(expr, state.prefix, naming)
        if route is not None:
            routes.append(route)


def _parse_add_call(call: ast.Call, prefix: str, naming: NamingConfig) -> Optional[RouteInfo]:
    if len(call.args) < 2:
        return None

    path = _const_str(call.args[0])
    if path is None:
        return None

    method_and_handler = _http_method_and_handler(call.args[1])
    if method_and_handler is None:
        return None
    method, handler = method_and_handler

    full_path = build_full_path(prefix, path)
    return RouteInfo(
        name=generate_route_name(full_path, method, naming),
        path=full_path,
        method=method,
        handler=handler,
    )


def _http_method_and_handler(node: ast.expr) -> Optional[tuple[str, str]]:
    # get(list_widgets) / routing.post(handlers.create_widget)
    if not isinstance(node, ast.Call) or len(node.args) != 1:
        return None

    verb = _last_segment(node.func)
    handler = _last_segment(node.args[0])
    if verb is None or handler is None:
        return None
    return verb.upper(), handler


def _is_dotted_name(node: ast.expr) -> bool:
    while isinstance(node, ast.Attribute):
        node = node.value
    return isinstance(node, ast.Name)


def _last_segment(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _const_str(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value.strip()
    return None
