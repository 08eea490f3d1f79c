from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

DiagnosticKind = Literal["duplicate_route", "duplicate_identifier", "parse_error"]


@dataclass(frozen=True)
class ReturnTypeInfo:
    """Best-effort response type of a handler.

    found_type is None when nothing recognizable was found; generators render
    that as `any`.
    """

    found_type: Optional[str] = None
    is_importable: bool = False
    error_types: tuple[str, ...] = ()   # ordered, no duplicates


@dataclass(frozen=True)
class HandlerInfo:
    body_param: Optional[str] = None
    requires_auth: bool = False
    return_type: ReturnTypeInfo = field(default_factory=ReturnTypeInfo)
    query_param: Optional[str] = None


@dataclass(frozen=True)
class RouteInfo:
    name: str                   # identifier base, before case conversion
    path: str                   # /v1/widgets/{id}
    method: str                 # GET, POST, ...
    handler: str                # join key into HandlerInfo
    handler_info: HandlerInfo = field(default_factory=HandlerInfo)


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    file_path: str = ""

    def __str__(self) -> str:
        if self.file_path:
            return f"{self.file_path}: {self.message}"
        return self.message
