from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from routegen.domain.models import Diagnostic, RouteInfo
from routegen.generators.typescript.types import ts_type
from routegen.utils.case import convert_to_case, sanitize_identifier
from routegen.utils.paths import extract_path_params

BASE_ERROR_TYPE = "ApiError"


@dataclass(frozen=True)
class TsRoute:
    """Names and types for one route, shared by client.ts and api.ts."""

    route: RouteInfo
    method_name: str                # getV1WidgetsId
    hook_name: str                  # useGetV1WidgetsId
    path_params: tuple[str, ...]    # as written in the path template
    params_type: Optional[str]      # GetV1WidgetsIdParams, when path_params
    query_type: Optional[str]
    body_type: Optional[str]
    response_type: str
    error_union: str

    @property
    def is_query(self) -> bool:
        return self.route.method == "GET"

    @property
    def field_names(self) -> list[str]:
        return [ts_field_name(p) for p in self.path_params]


def ts_field_name(param: str) -> str:
    return sanitize_identifier(convert_to_case(param, "camel"))


def _error_union(route: RouteInfo) -> str:
    return " | ".join([BASE_ERROR_TYPE, *route.handler_info.return_type.error_types])


def plan_ts_route(route: RouteInfo) -> TsRoute:
    # _2fa_verify -> _2faVerify, never a leading digit
    method_name = sanitize_identifier(convert_to_case(route.name, "camel"))
    pascal = sanitize_identifier(convert_to_case(route.name, "pascal"))
    params = tuple(extract_path_params(route.path))
    info = route.handler_info

    # fetch() refuses GET bodies, so GET routes have no body axis
    body = info.body_param if route.method != "GET" else None

    return TsRoute(
        route=route,
        method_name=method_name,
        hook_name=f"use{pascal}",
        path_params=params,
        params_type=f"{pascal}Params" if params else None,
        query_type=ts_type(info.query_param) if info.query_param else None,
        body_type=ts_type(body) if body else None,
        response_type=ts_type(info.return_type.found_type),
        error_union=_error_union(route),
    )


def plan_ts_routes(
    routes: Iterable[RouteInfo], diagnostics: Optional[list[Diagnostic]] = None
) -> list[TsRoute]:
    """
    Derive TypeScript names for every route.

    A route whose client method name is already taken is skipped (and reported),
    so the client and the hooks never disagree or overwrite each other.
    """
    planned: list[TsRoute] = []
    seen: dict[str, RouteInfo] = {}

    for route in routes:
        entry = plan_ts_route(route)
        existing = seen.get(entry.method_name)
        if existing is not None:
            if diagnostics is not None:
                diagnostics.append(
                    Diagnostic(
                        kind="duplicate_identifier",
                        message=(
                            f"Duplicate client method name '{entry.method_name}' for routes: "
                            f"{route.method} {route.path} and {existing.method} {existing.path}"
                        ),
                    )
                )
            continue
        seen[entry.method_name] = route
        planned.append(entry)

    return planned
