from __future__ import annotations

import os
from pathlib import Path

from routegen.errors import ControllerScanError

PACKAGE_INDEX = "__init__.py"


def list_modules(controllers_dir: Path) -> list[Path]:
    """
    Controller modules directly inside controllers_dir, sorted by file name.

    Only regular *.py files count; the package's own __init__.py is skipped.
    Not recursive: nested packages are separate controller trees.
    """
    try:
        names = os.listdir(controllers_dir)
    except OSError as e:
        raise ControllerScanError(str(controllers_dir), e.strerror or str(e)) from e

    out: list[Path] = []
    for name in sorted(names):
        if not name.endswith(".py") or name == PACKAGE_INDEX:
            continue
        p = controllers_dir / name
        if p.is_file():
            out.append(p)
    return out
