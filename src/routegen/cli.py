from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from routegen.config.settings import Config, load_config
from routegen.errors import RoutegenError
from routegen.orchestrator.pipeline import run_generate, write_outputs


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()
err_console = Console(stderr=True)


def _build_config(
    controllers: str,
    config_file: Optional[str],
    links_out: Optional[str] = None,
    ts_out: Optional[str] = None,
    strict: bool = False,
) -> Config:
    config = load_config(Path(config_file).expanduser()) if config_file else Config()

    controllers_path = Path(controllers).expanduser().resolve()
    if not controllers_path.is_dir():
        raise typer.BadParameter(f"Controllers path is not a directory: {controllers_path}")

    update: dict = {"controllers_path": controllers_path}
    if links_out:
        update["links_output_path"] = Path(links_out).expanduser().resolve()
    if strict:
        update["strict"] = True
    if ts_out:
        update["typescript"] = config.typescript.model_copy(
            update={"output_path": Path(ts_out).expanduser().resolve(), "generate_client": True}
        )
    return config.model_copy(update=update)


def _print_diagnostics(diagnostics) -> None:
    for d in diagnostics:
        err_console.print("[yellow]warning[/yellow] " + escape(f"[{d.kind}] {d}"))


@app.command()
def generate(
    controllers: str = typer.Argument(..., help="Directory of controller modules"),
    config_file: Optional[str] = typer.Option(None, "--config", help="TOML config file"),
    links_out: Optional[str] = typer.Option(None, help="Where to write the Python links module"),
    ts_out: Optional[str] = typer.Option(None, help="Directory for client.ts and api.ts"),
    strict: bool = typer.Option(False, help="Fail on the first unparsable controller"),
) -> None:
    try:
        config = _build_config(controllers, config_file, links_out, ts_out, strict)
        result = run_generate(config)
        written = write_outputs(result, config)
    except RoutegenError as e:
        err_console.print("[bold red]error[/bold red] " + escape(str(e)))
        raise typer.Exit(code=1)

    _print_diagnostics(result.diagnostics)

    if config.links_output_path is None:
        # links module goes to stdout so it can be redirected
        typer.echo(result.links_code, nl=False)

    err_console.print(
        f"[bold green]routegen[/bold green] {len(result.routes)} routes "
        f"from {result.modules_scanned} modules"
    )
    for p in written:
        err_console.print(f"  wrote {p}")
    if not result.typescript_generated:
        err_console.print("  TypeScript output skipped (no output directory configured)")


@app.command()
def routes(
    controllers: str = typer.Argument(..., help="Directory of controller modules"),
    config_file: Optional[str] = typer.Option(None, "--config", help="TOML config file"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    try:
        config = _build_config(controllers, config_file)
        result = run_generate(config)
    except RoutegenError as e:
        err_console.print("[bold red]error[/bold red] " + escape(str(e)))
        raise typer.Exit(code=1)

    _print_diagnostics(result.diagnostics)

    if fmt == "json":
        payload = [
            {
                "method": r.method,
                "path": r.path,
                "name": r.name,
                "handler": r.handler,
                "body": r.handler_info.body_param,
                "query": r.handler_info.query_param,
                "response": r.handler_info.return_type.found_type,
                "errors": list(r.handler_info.return_type.error_types),
                "auth": r.handler_info.requires_auth,
            }
            for r in result.routes
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("NAME")
    table.add_column("HANDLER")
    table.add_column("BODY")
    table.add_column("RESPONSE")
    table.add_column("AUTH", no_wrap=True)

    for r in result.routes:
        info = r.handler_info
        table.add_row(
            r.method,
            r.path,
            r.name,
            r.handler,
            info.body_param or "-",
            info.return_type.found_type or "?",
            "yes" if info.requires_auth else "",
        )

    console.print(table)


@app.command()
def ping() -> None:
    console.print("pong")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
