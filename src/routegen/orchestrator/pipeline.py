from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from routegen.config.settings import Config
from routegen.domain.models import Diagnostic, RouteInfo
from routegen.errors import ParseError
from routegen.extractors.controller import extract_routes_from_file
from routegen.generators.python_links import generate_links
from routegen.generators.typescript.client import generate_client
from routegen.generators.typescript.hooks import generate_hooks
from routegen.generators.typescript.naming import plan_ts_routes
from routegen.repo.scanner import list_modules

CLIENT_FILENAME = "client.ts"
HOOKS_FILENAME = "api.ts"


@dataclass(frozen=True)
class GenerateResult:
    routes: list[RouteInfo]
    links_code: str
    client_code: Optional[str] = None
    hooks_code: Optional[str] = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    modules_scanned: int = 0

    @property
    def typescript_generated(self) -> bool:
        return self.client_code is not None


def assemble_routes(
    module_routes: Iterable[tuple[str, list[RouteInfo]]],
    diagnostics: list[Diagnostic],
) -> list[RouteInfo]:
    """
    Merge per-module route lists into one collection keyed by (method, path).

    Input order is preserved; a later declaration of an existing key is dropped
    and reported with both handler names.
    """
    seen: dict[tuple[str, str], RouteInfo] = {}
    out: list[RouteInfo] = []

    for file_path, routes in module_routes:
        for r in routes:
            key = (r.method, r.path)
            existing = seen.get(key)
            if existing is not None:
                diagnostics.append(
                    Diagnostic(
                        kind="duplicate_route",
                        message=(
                            f"Duplicate route skipped: {r.method} {r.path} "
                            f"(handler '{r.handler}' conflicts with '{existing.handler}')"
                        ),
                        file_path=file_path,
                    )
                )
                continue
            seen[key] = r
            out.append(r)

    return out


def scan_controllers(config: Config, diagnostics: list[Diagnostic]) -> tuple[list[RouteInfo], int]:
    """
    Extract and assemble the routes of every controller module.

    Unparsable modules are skipped with a parse_error diagnostic unless
    config.strict is set. An unreadable controllers directory always aborts.
    """
    modules = list_modules(config.controllers_path)

    per_module: list[tuple[str, list[RouteInfo]]] = []
    for path in modules:
        try:
            routes = extract_routes_from_file(path, config.naming, config.routes_function)
        except (OSError, UnicodeDecodeError) as e:
            if config.strict:
                raise ParseError(str(path), str(e)) from e
            diagnostics.append(Diagnostic(kind="parse_error", message=str(e), file_path=str(path)))
            continue
        except ParseError as e:
            if config.strict:
                raise
            diagnostics.append(Diagnostic(kind="parse_error", message=e.message, file_path=str(path)))
            continue
        per_module.append((str(path), routes))

    return assemble_routes(per_module, diagnostics), len(modules)


def run_generate(config: Config) -> GenerateResult:
    """
    Full run: scan controllers, build one route model, render every artifact.

    TypeScript output is only rendered when typescript.generate_client is set
    and an output directory is configured.
    """
    diagnostics: list[Diagnostic] = []
    routes, modules_scanned = scan_controllers(config, diagnostics)

    links_code = generate_links(routes, config.naming, diagnostics)

    client_code = hooks_code = None
    ts = config.typescript
    if ts.generate_client and ts.output_path is not None:
        ts_routes = plan_ts_routes(routes, diagnostics)
        client_code = generate_client(ts_routes, ts)
        hooks_code = generate_hooks(ts_routes, ts)

    return GenerateResult(
        routes=routes,
        links_code=links_code,
        client_code=client_code,
        hooks_code=hooks_code,
        diagnostics=diagnostics,
        modules_scanned=modules_scanned,
    )


def write_outputs(result: GenerateResult, config: Config) -> list[Path]:
    """Write the generated artifacts to their configured locations; returns the paths written."""
    written: list[Path] = []

    if config.links_output_path is not None:
        out = config.links_output_path
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.links_code, encoding="utf-8")
        written.append(out)

    ts_dir = config.typescript.output_path
    if ts_dir is not None and result.client_code is not None and result.hooks_code is not None:
        ts_dir.mkdir(parents=True, exist_ok=True)
        for name, code in ((CLIENT_FILENAME, result.client_code), (HOOKS_FILENAME, result.hooks_code)):
            out = ts_dir / name
            out.write_text(code, encoding="utf-8")
            written.append(out)

    return written
