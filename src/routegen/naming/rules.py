from __future__ import annotations

import re
from typing import Optional

from routegen.config.settings import NamingConfig
from routegen.utils.case import convert_to_case, sanitize_identifier

DEFAULT_WORD_SEPARATORS = "-/.:"

_MULTI_UNDERSCORE = re.compile(r"_{2,}")


def _strip_name_prefix(path: str, prefix: Optional[str]) -> str:
    # works on the naming copy only; the route path keeps its prefix
    trimmed = path.strip("/")
    if not prefix:
        return trimmed
    p = prefix.strip("/")
    if not p:
        return trimmed
    if trimmed == p:
        return ""
    if trimmed.startswith(p + "/"):
        return trimmed[len(p):].lstrip("/")
    return trimmed


def clean_path_for_name(path: str, separators: Optional[str] = None) -> str:
    result = path.strip("/").replace("{", "").replace("}", "")
    for sep in separators if separators is not None else DEFAULT_WORD_SEPARATORS:
        result = result.replace(sep, "_")
    result = _MULTI_UNDERSCORE.sub("_", result)
    return result.strip("_")


def generate_route_name(path: str, method: str, naming: NamingConfig) -> str:
    """
    Derive the identifier base for a route.

    GET /v1/widgets/{id} -> get_v1_widgets_id
    """
    name_path = _strip_name_prefix(path, naming.path_prefix_to_remove)
    base = clean_path_for_name(name_path, naming.word_separators) or "root"

    name = f"{method.lower()}_{base}" if naming.include_method_in_names else base
    return sanitize_identifier(name)


def variant_name(route_name: str, naming: NamingConfig) -> str:
    result = convert_to_case(route_name, naming.variant_case)
    if naming.variant_prefix:
        result = naming.variant_prefix + result
    if naming.variant_suffix:
        result = result + naming.variant_suffix
    return sanitize_identifier(result)


def field_name(param: str, naming: NamingConfig) -> str:
    return sanitize_identifier(convert_to_case(param, naming.field_case))
