from __future__ import annotations

import json
from typing import Iterable, Optional

from routegen.config.settings import NamingConfig
from routegen.domain.models import Diagnostic, RouteInfo
from routegen.naming.rules import field_name, variant_name
from routegen.utils.paths import extract_path_params, is_param_segment, path_segments

HEADER = "# Auto-generated by routegen. Do not edit by hand."

# names the generated module defines itself
_RESERVED = {"Link", "LINK_METHODS", "dataclass", "annotations"}
# field names that would shadow the receiver or Link methods
_RESERVED_FIELDS = {"self", "to_path", "method"}

_PRELUDE = '''from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Link:
    """A typed link to one application route."""

    def to_path(self) -> str:
        raise NotImplementedError

    def method(self) -> str:
        return LINK_METHODS[type(self)]

    def __str__(self) -> str:
        return self.to_path()'''


def _literal(value: str) -> str:
    return json.dumps(value)


def path_build_expr(path: str, fields: dict[str, str]) -> str:
    """
    Python expression rebuilding `path` from literal segments and dataclass fields.

    /v1/widgets/{id} -> "/" + "/".join(("v1", "widgets", self.id))
    """
    steps = []
    for seg in path_segments(path):
        if is_param_segment(seg) and seg[1:-1] in fields:
            steps.append(f"self.{fields[seg[1:-1]]}")
        else:
            steps.append(_literal(seg))

    if not steps:
        return _literal("/")
    return f'"/" + "/".join(({", ".join(steps)},))'


def _variant_block(name: str, route: RouteInfo, fields: dict[str, str]) -> list[str]:
    lines = ["", "", "@dataclass(frozen=True)", f"class {name}(Link):"]
    lines.append(f'    """{route.method} {route.path}"""')
    lines.append("")
    if fields:
        for f in fields.values():
            lines.append(f"    {f}: str")
        lines.append("")
        body = path_build_expr(route.path, fields)
    else:
        body = _literal(route.path)
    lines.append("    def to_path(self) -> str:")
    lines.append(f"        return {body}")
    return lines


def generate_links(
    routes: Iterable[RouteInfo],
    naming: NamingConfig,
    diagnostics: Optional[list[Diagnostic]] = None,
) -> str:
    """
    Render a Python module with one frozen dataclass per route.

    Routes whose class name (or field names) would collide are skipped and reported.
    """
    blocks: list[str] = []
    methods: list[tuple[str, str]] = []
    seen: dict[str, RouteInfo] = {}

    def report(message: str) -> None:
        if diagnostics is not None:
            diagnostics.append(Diagnostic(kind="duplicate_identifier", message=message))

    for route in routes:
        name = variant_name(route.name, naming)

        if name in _RESERVED:
            report(f"Variant name '{name}' for route {route.method} {route.path} is reserved")
            continue
        existing = seen.get(name)
        if existing is not None:
            report(
                f"Duplicate variant name '{name}' for routes: "
                f"{route.method} {route.path} and {existing.method} {existing.path}"
            )
            continue

        fields = {p: field_name(p, naming) for p in extract_path_params(route.path)}
        if len(set(fields.values())) != len(fields) or _RESERVED_FIELDS & set(fields.values()):
            report(
                f"Path parameters of {route.method} {route.path} collide after case conversion "
                "or shadow Link attributes"
            )
            continue

        seen[name] = route
        blocks.extend(_variant_block(name, route, fields))
        methods.append((name, route.method))

    lines = [HEADER, _PRELUDE]
    lines.extend(blocks)
    lines.append("")
    lines.append("")
    lines.append("LINK_METHODS: dict[type[Link], str] = {")
    for name, method in methods:
        lines.append(f"    {name}: {_literal(method)},")
    lines.append("}")
    lines.append("")
    lines.append("__all__ = [")
    for name in ["Link", "LINK_METHODS", *(n for n, _ in methods)]:
        lines.append(f"    {_literal(name)},")
    lines.append("]")

    return "\n".join(lines) + "\n"
