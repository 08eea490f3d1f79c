from __future__ import annotations

import ast
from dataclasses import replace
from pathlib import Path

from routegen.config.settings import NamingConfig
from routegen.domain.models import HandlerInfo, RouteInfo
from routegen.errors import ParseError
from routegen.extractors.chain import extract_routes_from_function, find_routes_function
from routegen.extractors.handlers import extract_handler_info


def extract_routes_from_source(
    source: str,
    naming: NamingConfig,
    routes_function: str = "routes",
    file_path: str = "<string>",
) -> list[RouteInfo]:
    """
    Parse one controller module and return its routes with handler metadata joined in.

    Uses ast only; does not import/execute code. Raises ParseError on invalid syntax.
    """
    try:
        tree = ast.parse(source, filename=file_path)
    except SyntaxError as e:
        raise ParseError(file_path, f"{e.msg} (line {e.lineno})") from e

    func = find_routes_function(tree, routes_function)
    if func is None:
        return []

    routes = extract_routes_from_function(func, naming)
    if not routes:
        return []

    handler_info = extract_handler_info(tree)
    # unknown handlers keep the "no body, no auth, unknown type" default
    return [
        replace(r, handler_info=handler_info.get(r.handler, HandlerInfo()))
        for r in routes
    ]


def extract_routes_from_file(
    path: Path, naming: NamingConfig, routes_function: str = "routes"
) -> list[RouteInfo]:
    source = path.read_text(encoding="utf-8")
    return extract_routes_from_source(source, naming, routes_function, file_path=str(path))
