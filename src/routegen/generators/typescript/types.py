from __future__ import annotations

from typing import Optional

FALLBACK_TYPE = "any"

_PY_TO_TS = {
    "str": "string",
    "bytes": "string",
    "int": "number",
    "float": "number",
    "complex": "number",
    "bool": "boolean",
    "None": "null",
    "dict": "Record<string, unknown>",
    "Dict": "Record<string, unknown>",
}

_GENERICS = ("Array", "Option", "Result")


def ts_type(name: Optional[str]) -> str:
    """
    Render an inferred (Python-side) type name as TypeScript.

    None -> any; Array<int> -> Array<number>; Widget -> Widget
    """
    if name is None:
        return FALLBACK_TYPE
    for generic in _GENERICS:
        if name.startswith(f"{generic}<") and name.endswith(">"):
            inner = name[len(generic) + 1:-1]
            rendered = ", ".join(ts_type(part.strip()) for part in inner.split(","))
            return f"{generic}<{rendered}>"
    return _PY_TO_TS.get(name, name)
