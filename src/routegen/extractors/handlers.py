from __future__ import annotations

import ast
import builtins
from typing import Iterable, Optional

from routegen.domain.models import HandlerInfo, ReturnTypeInfo

AnyFunctionDef = ast.FunctionDef | ast.AsyncFunctionDef

BODY_WRAPPERS = {"Json", "JsonValidate", "JsonValidateWithMessage"}
QUERY_WRAPPERS = {"Query"}
AUTH_PARAM = "auth"
AUTH_TYPE = "JWT"

JSON_RESPONDER = "json"

BUILTIN_SCALARS = {"int", "float", "str", "bool", "bytes", "complex"}

# annotations that say nothing about the payload
OPAQUE_RETURNS = {"Response", "IntoResponse", "Any", "object"}

RESULT_WRAPPERS = {"Result", "Json"}
OPTIONAL_WRAPPERS = {"Optional"}
SEQUENCE_WRAPPERS = {"list", "List", "Sequence"}


def _dotted(node: ast.expr) -> Optional[list[str]]:
    # Widget.from_model -> [Widget, from_model]
    if isinstance(node, ast.Name):
        return [node.id]
    if isinstance(node, ast.Attribute):
        inner = _dotted(node.value)
        return None if inner is None else [*inner, node.attr]
    return None


def _last_name(node: ast.expr) -> Optional[str]:
    parts = _dotted(node)
    return parts[-1] if parts else None


def _subscript_args(node: ast.Subscript) -> list[ast.expr]:
    if isinstance(node.slice, ast.Tuple):
        return list(node.slice.elts)
    return [node.slice]


def _is_python_builtin(name: str) -> bool:
    return hasattr(builtins, name)


def _is_builtin_exception(name: str) -> bool:
    obj = getattr(builtins, name, None)
    return isinstance(obj, type) and issubclass(obj, BaseException)


def _string_annotation(node: ast.expr) -> ast.expr:
    # "Widget" -> Name(Widget); anything unparsable is returned unchanged
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            return ast.parse(node.value, mode="eval").body
        except SyntaxError:
            return node
    return node


class ReturnTypeVisitor:
    """
    Walks a handler body looking for the first response construction.

    The first match wins: every visit method bails out once found_type is set,
    so traversal order (statements in sequence, receivers before arguments)
    decides which of several responses is reported.
    """

    def __init__(self) -> None:
        self.found_type: Optional[str] = None
        self.is_importable = False

    @property
    def done(self) -> bool:
        return self.found_type is not None

    def visit_function(self, func: AnyFunctionDef) -> None:
        self.visit_body(func.body)

    def visit_body(self, body: Iterable[ast.stmt]) -> None:
        for stmt in body:
            if self.done:
                return
            self.visit_stmt(stmt)

    def visit_stmt(self, stmt: ast.stmt) -> None:
        if self.done:
            return

        if isinstance(stmt, (ast.Expr, ast.Return, ast.Assign, ast.AnnAssign, ast.AugAssign)):
            if stmt.value is not None:
                self.visit_expr(stmt.value)
        elif isinstance(stmt, (ast.If, ast.While)):
            self.visit_expr(stmt.test)
            self.visit_body(stmt.body)
            self.visit_body(stmt.orelse)
        elif isinstance(stmt, ast.Match):
            self.visit_expr(stmt.subject)
            for case in stmt.cases:
                self.visit_body(case.body)
        elif isinstance(stmt, (ast.With, ast.AsyncWith)):
            self.visit_body(stmt.body)
        elif isinstance(stmt, (ast.For, ast.AsyncFor)):
            self.visit_expr(stmt.iter)
            self.visit_body(stmt.body)
            self.visit_body(stmt.orelse)
        elif isinstance(stmt, (ast.Try, ast.TryStar)):
            self.visit_body(stmt.body)
            for handler in stmt.handlers:
                self.visit_body(handler.body)
            self.visit_body(stmt.orelse)
            self.visit_body(stmt.finalbody)
        # nested defs, imports, raise, ... carry no response

    def visit_expr(self, expr: ast.expr) -> None:
        if self.done:
            return

        if isinstance(expr, ast.Call):
            if _last_name(expr.func) == JSON_RESPONDER:
                # format.json(<payload>): the payload decides, even when unrecognized
                if expr.args:
                    self.visit_conversion(expr.args[0])
                    return
            if isinstance(expr.func, ast.Attribute):
                self.visit_expr(expr.func.value)
            for arg in expr.args:
                self.visit_expr(arg)
        elif isinstance(expr, ast.Await):
            self.visit_expr(expr.value)
        elif isinstance(expr, ast.IfExp):
            self.visit_expr(expr.test)
            self.visit_expr(expr.body)
            self.visit_expr(expr.orelse)
        elif isinstance(expr, ast.NamedExpr):
            self.visit_expr(expr.value)

    def visit_conversion(self, expr: ast.expr) -> None:
        if not isinstance(expr, ast.Call):
            # a variable or attribute: its type is unknowable without inference
            return

        if isinstance(expr.func, ast.Subscript):
            self._visit_empty_collection(expr, expr.func)
            return

        parts = _dotted(expr.func)
        if not parts:
            return

        if len(parts) == 1 and parts[0] in BUILTIN_SCALARS:
            # str(x)
            self.found_type = parts[0]
            self.is_importable = False
            return

        if parts[-1][:1].isupper():
            # Widget(w) / schemas.Widget(w)
            type_name = parts[-1]
        elif len(parts) >= 2 and parts[-2][:1].isupper():
            # Widget.from_model(w)
            type_name = parts[-2]
        else:
            # plain function calls say nothing about the type
            return

        if not _is_python_builtin(type_name):
            self.found_type = type_name
            self.is_importable = True

    def _visit_empty_collection(self, call: ast.Call, sub: ast.Subscript) -> None:
        # list[Widget]() -> Array<Widget>
        if call.args or call.keywords or _last_name(sub.value) not in SEQUENCE_WRAPPERS:
            return
        args = _subscript_args(sub)
        inner = _last_name(args[0]) if len(args) == 1 else None
        if inner is None:
            return
        self.found_type = f"Array<{inner}>"
        self.is_importable = inner not in BUILTIN_SCALARS


def _is_none(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def _annotation_type(node: Optional[ast.expr]) -> tuple[Optional[str], bool]:
    """
    Payload type named by a return annotation, and whether it is importable.

    Result[Json[Widget], ApiError] -> ("Widget", True)
    list[str]                      -> ("Array<str>", False)
    Response                       -> (None, False)
    """
    if node is None:
        return None, False
    node = _string_annotation(node)

    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        # Widget | None
        arms = [a for a in (node.left, node.right) if not _is_none(a)]
        if len(arms) == 1:
            return _annotation_type(arms[0])
        return None, False

    if isinstance(node, ast.Subscript):
        base = _last_name(node.value)
        args = _subscript_args(node)
        if base in RESULT_WRAPPERS or base in OPTIONAL_WRAPPERS:
            return _annotation_type(args[0])
        if base in SEQUENCE_WRAPPERS and len(args) == 1:
            inner, importable = _annotation_type(args[0])
            if inner is None:
                return None, False
            return f"Array<{inner}>", importable
        if base is None:
            return None, False
        return base, base not in BUILTIN_SCALARS and not _is_python_builtin(base)

    name = _last_name(node)
    if name is None or name in OPAQUE_RETURNS:
        return None, False
    return name, name not in BUILTIN_SCALARS and not _is_python_builtin(name)


def _result_error_type(node: Optional[ast.expr]) -> Optional[str]:
    if node is None:
        return None
    node = _string_annotation(node)
    if isinstance(node, ast.Subscript) and _last_name(node.value) == "Result":
        args = _subscript_args(node)
        if len(args) >= 2:
            name = _last_name(args[1])
            if name and not _is_python_builtin(name):
                return name
    return None


def _raised_error_types(func: AnyFunctionDef) -> list[str]:
    raises = [n for n in ast.walk(func) if isinstance(n, ast.Raise) and n.exc is not None]
    raises.sort(key=lambda n: (n.lineno, n.col_offset))

    out: list[str] = []
    for r in raises:
        exc = r.exc.func if isinstance(r.exc, ast.Call) else r.exc
        name = _last_name(exc)
        if name and not _is_builtin_exception(name) and name not in out:
            out.append(name)
    return out


def infer_return_type(func: AnyFunctionDef) -> ReturnTypeInfo:
    """Body first, declared return annotation as the fallback."""
    visitor = ReturnTypeVisitor()
    visitor.visit_function(func)

    found_type, importable = visitor.found_type, visitor.is_importable
    if found_type is None:
        found_type, importable = _annotation_type(func.returns)

    errors = _raised_error_types(func)
    result_error = _result_error_type(func.returns)
    if result_error and result_error not in errors:
        errors.append(result_error)

    return ReturnTypeInfo(
        found_type=found_type,
        is_importable=importable,
        error_types=tuple(errors),
    )


def _wrapped_param_type(annotation: Optional[ast.expr], wrappers: set[str]) -> Optional[str]:
    if annotation is None:
        return None
    annotation = _string_annotation(annotation)
    if not isinstance(annotation, ast.Subscript):
        return None
    if _last_name(annotation.value) not in wrappers:
        return None
    args = _subscript_args(annotation)
    return _last_name(args[0]) if args else None


def _all_args(func: AnyFunctionDef) -> list[ast.arg]:
    a = func.args
    return [*a.posonlyargs, *a.args, *a.kwonlyargs]


def infer_handler_info(func: AnyFunctionDef) -> HandlerInfo:
    body_param: Optional[str] = None
    query_param: Optional[str] = None
    requires_auth = False

    for arg in _all_args(func):
        body = _wrapped_param_type(arg.annotation, BODY_WRAPPERS)
        if body is not None:
            body_param = body

        query = _wrapped_param_type(arg.annotation, QUERY_WRAPPERS)
        if query is not None:
            query_param = query

        if arg.arg == AUTH_PARAM and arg.annotation is not None:
            if _last_name(_string_annotation(arg.annotation)) == AUTH_TYPE:
                requires_auth = True

    return HandlerInfo(
        body_param=body_param,
        requires_auth=requires_auth,
        return_type=infer_return_type(func),
        query_param=query_param,
    )


def extract_handler_info(tree: ast.Module) -> dict[str, HandlerInfo]:
    """HandlerInfo for every top-level function in a parsed module."""
    info: dict[str, HandlerInfo] = {}
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            info[node.name] = infer_handler_info(node)
    return info
