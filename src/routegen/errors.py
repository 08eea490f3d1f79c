from __future__ import annotations


class RoutegenError(Exception):
    """Base class for errors that abort a generation run."""


class ControllerScanError(RoutegenError):
    def __init__(self, directory: str, reason: str):
        super().__init__(f"Failed to read controllers directory {directory}: {reason}")
        self.directory = directory
        self.reason = reason


class ParseError(RoutegenError):
    """A controller module could not be parsed. Fatal only in strict mode."""

    def __init__(self, file_path: str, message: str):
        super().__init__(f"Failed to parse {file_path}: {message}")
        self.file_path = file_path
        self.message = message
