from __future__ import annotations

from typing import Iterable, Optional

from routegen.domain.models import RouteInfo
from routegen.generators.typescript.types import ts_type

TS_BUILTINS = {
    "string",
    "number",
    "boolean",
    "any",
    "void",
    "unknown",
    "null",
    "undefined",
    "Array",
    "Promise",
    "Record<string, unknown>",
}


def generic_inner_type(type_str: str) -> Optional[str]:
    """One level of Array<T> / Option<T> / Result<T, E> (success arm only)."""
    for prefix in ("Array<", "Option<"):
        if type_str.startswith(prefix) and type_str.endswith(">"):
            return type_str[len(prefix):-1].strip()
    if type_str.startswith("Result<") and type_str.endswith(">"):
        return type_str[len("Result<"):-1].split(",")[0].strip()
    return None


class TypeImportCollector:
    """
    Collects the user-defined type names that generated TypeScript must import.

    Shared by the client and hooks generators so both files import the same set.
    """

    def __init__(self) -> None:
        self.type_imports: set[str] = set()
        self.error_imports: set[str] = set()

    def collect_from_routes(self, routes: Iterable[RouteInfo]) -> "TypeImportCollector":
        for route in routes:
            info = route.handler_info
            if info.body_param and route.method != "GET":
                self.add_type(ts_type(info.body_param))
            if info.query_param:
                self.add_type(ts_type(info.query_param))
            rt = info.return_type
            if rt.found_type and rt.is_importable:
                self.add_type(ts_type(rt.found_type))
            for error_type in rt.error_types:
                self.error_imports.add(error_type)
        return self

    def add_type(self, type_str: str) -> None:
        inner = generic_inner_type(type_str)
        if inner is not None:
            self.add_type(inner)
        elif type_str not in TS_BUILTINS:
            self.type_imports.add(type_str)

    def import_lines(self, bindings_path: str) -> list[str]:
        base = bindings_path.rstrip("/")
        names = sorted(self.type_imports | self.error_imports)
        return [f'import {{ type {name} }} from "{base}/{name}";' for name in names]
