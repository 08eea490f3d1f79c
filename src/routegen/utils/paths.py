from __future__ import annotations


def is_param_segment(segment: str) -> bool:
    return len(segment) > 2 and segment.startswith("{") and segment.endswith("}")


def extract_path_params(path: str) -> list[str]:
    """Placeholder names in order of appearance, without duplicates."""
    params: list[str] = []
    for seg in path.split("/"):
        if is_param_segment(seg):
            name = seg[1:-1]
            if name not in params:
                params.append(name)
    return params


def path_segments(path: str) -> list[str]:
    return [seg for seg in path.split("/") if seg]


def build_full_path(prefix: str, path: str) -> str:
    """
    Join a chain prefix and a declared path with exactly one slash between them.

    build_full_path("/api/", "/users") -> "/api/users"
    build_full_path("/api", "/") -> "/api"
    """
    joined = f"{prefix.rstrip('/')}/{path.lstrip('/')}" if prefix else path
    if not joined.startswith("/"):
        joined = "/" + joined
    return joined.rstrip("/") or "/"
