from __future__ import annotations

from typing import Sequence

from routegen.config.settings import TypeScriptConfig
from routegen.generators.typescript.client import HEADER
from routegen.generators.typescript.imports import TypeImportCollector
from routegen.generators.typescript.naming import TsRoute


def query_key(entry: TsRoute) -> str:
    parts = [f'"{entry.method_name}"']
    if entry.params_type:
        parts.append("params")
    if entry.query_type:
        parts.append("query")
    return "[" + ", ".join(parts) + "]"


def query_hook(entry: TsRoute) -> list[str]:
    args = []
    call_args = []
    if entry.params_type:
        args.append(f"params: {entry.params_type}")
        call_args.append("params")
    if entry.query_type:
        args.append(f"query: {entry.query_type}")
        call_args.append("query")
    args.append(
        f'options?: Omit<UseQueryOptions<{entry.response_type}, {entry.error_union}>, "queryKey" | "queryFn">'
    )
    call_args.append("{ signal }")

    return [
        f"export function {entry.hook_name}({', '.join(args)}) {{",
        "  return useQuery({",
        f"    queryKey: {query_key(entry)},",
        f"    queryFn: ({{ signal }}) => client.{entry.method_name}({', '.join(call_args)}),",
        "    ...options,",
        "  });",
        "}",
    ]


def mutation_variables(entry: TsRoute) -> str:
    """
    Variables type of a mutation hook.

    Nothing -> void; only a body -> the body type; otherwise an object holding
    whichever of params/query/body the route takes.
    """
    fields = []
    if entry.params_type:
        fields.append(f"params: {entry.params_type}")
    if entry.query_type:
        fields.append(f"query: {entry.query_type}")
    if entry.body_type:
        fields.append(f"body: {entry.body_type}")

    if not fields:
        return "void"
    if fields == [f"body: {entry.body_type}"]:
        return entry.body_type or "void"
    return "{ " + "; ".join(fields) + " }"


def _mutation_fn(entry: TsRoute, variables: str) -> str:
    if variables == "void":
        return f"() => client.{entry.method_name}()"
    if not entry.params_type and not entry.query_type:
        return f"(body: {variables}) => client.{entry.method_name}(body)"

    call_args = []
    if entry.params_type:
        call_args.append("input.params")
    if entry.query_type:
        call_args.append("input.query")
    if entry.body_type:
        call_args.append("input.body")
    return f"(input: {variables}) => client.{entry.method_name}({', '.join(call_args)})"


def mutation_hook(entry: TsRoute) -> list[str]:
    variables = mutation_variables(entry)
    options = f"UseMutationOptions<{entry.response_type}, {entry.error_union}, {variables}, unknown>"
    return [
        f"export function {entry.hook_name}(options?: Omit<{options}, \"mutationFn\">) {{",
        "  return useMutation({",
        f"    mutationFn: {_mutation_fn(entry, variables)},",
        "    ...options,",
        "  });",
        "}",
    ]


def generate_hooks(ts_routes: Sequence[TsRoute], config: TypeScriptConfig) -> str:
    """Render api.ts: one TanStack Query hook per route, calling into ./client."""
    collector = TypeImportCollector().collect_from_routes(e.route for e in ts_routes)

    client_names = ["type ApiError", "type BadRequestErrorDetails", "isBadRequestError", "client"]
    client_names.extend(f"type {e.params_type}" for e in ts_routes if e.params_type)

    lines: list[str] = [HEADER]
    lines.append(
        "import { useQuery, useMutation, type UseQueryOptions, type UseMutationOptions } "
        'from "@tanstack/react-query";'
    )
    lines.append(f'import {{ {", ".join(client_names)} }} from "./client";')
    lines.extend(collector.import_lines(config.bindings_path))
    lines.append("")
    lines.append("// Re-export error utilities for convenience")
    lines.append("export { type ApiError, type BadRequestErrorDetails, isBadRequestError };")

    for entry in ts_routes:
        lines.append("")
        lines.extend(query_hook(entry) if entry.is_query else mutation_hook(entry))

    return "\n".join(lines) + "\n"
