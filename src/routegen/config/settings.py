from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from routegen.errors import RoutegenError


class NamingConfig(BaseModel):
    include_method_in_names: bool = True
    # removed from the generated name only, never from the route path
    path_prefix_to_remove: Optional[str] = None
    variant_case: str = "pascal"
    field_case: str = "snake"
    # None means the default set "-/.:"
    word_separators: Optional[str] = None
    variant_prefix: Optional[str] = None
    variant_suffix: Optional[str] = None


class TypeScriptConfig(BaseModel):
    output_path: Optional[Path] = None
    generate_client: bool = False
    bindings_path: str = "../../../bindings"
    token_module: str = "@/hooks/use-auth"
    token_key: str = "TOKEN_KEY"


class Config(BaseModel):
    controllers_path: Path = Path("src/controllers")
    routes_function: str = "routes"
    links_output_path: Optional[Path] = None
    strict: bool = False
    naming: NamingConfig = Field(default_factory=NamingConfig)
    typescript: TypeScriptConfig = Field(default_factory=TypeScriptConfig)


def _section(data: dict[str, Any]) -> dict[str, Any]:
    # pyproject.toml keeps its settings under [tool.routegen]
    tool = data.get("tool")
    if isinstance(tool, dict) and isinstance(tool.get("routegen"), dict):
        return tool["routegen"]
    return data


def _resolve(base: Path, value: Optional[Path]) -> Optional[Path]:
    if value is None or value.is_absolute():
        return value
    return (base / value).resolve()


def load_config(path: Path) -> Config:
    """
    Load a Config from a TOML file.

    Relative paths in the file are resolved against the file's directory so the
    same config works no matter where the command is launched from.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RoutegenError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise RoutegenError(f"Invalid TOML in {path}: {e}") from e

    try:
        config = Config.model_validate(_section(data))
    except ValidationError as e:
        raise RoutegenError(f"Invalid configuration in {path}: {e}") from e

    base = path.resolve().parent
    ts = config.typescript.model_copy(
        update={"output_path": _resolve(base, config.typescript.output_path)}
    )
    return config.model_copy(
        update={
            "controllers_path": _resolve(base, config.controllers_path),
            "links_output_path": _resolve(base, config.links_output_path),
            "typescript": ts,
        }
    )
