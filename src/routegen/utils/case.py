from __future__ import annotations

import keyword
import re

# acronym before a capitalized word, a (capitalized) lowercase run, or an upper/digit run
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z0-9]+|[A-Z0-9]+")


def split_words(value: str) -> list[str]:
    """
    Split an identifier-ish string into words.

    get_v1_widgets -> [get, v1, widgets]; getWidgetById -> [get, Widget, By, Id];
    HTTPServer -> [HTTP, Server]
    """
    return _WORD.findall(value)


def convert_to_case(value: str, case: str) -> str:
    words = split_words(value)
    c = case.lower()

    if c in ("pascal", "pascalcase"):
        return "".join(w.capitalize() for w in words)
    if c in ("camel", "camelcase"):
        if not words:
            return ""
        return words[0].lower() + "".join(w.capitalize() for w in words[1:])
    if c in ("snake", "snake_case"):
        return "_".join(w.lower() for w in words)
    if c in ("kebab", "kebab-case"):
        return "-".join(w.lower() for w in words)
    if c in ("title", "title_case"):
        return " ".join(w.capitalize() for w in words)
    if c in ("lower", "lowercase"):
        return value.lower()
    if c in ("upper", "uppercase"):
        return value.upper()

    # unknown case names leave the input alone
    return value


def sanitize_identifier(name: str) -> str:
    """
    Force `name` into a valid identifier: a leading underscore when the first
    character is not a letter/underscore, every other invalid character becomes
    an underscore, and Python keywords get a trailing underscore.
    """
    if not name:
        return "_"

    out = []
    if not (name[0].isalpha() or name[0] == "_"):
        out.append("_")
    for ch in name:
        out.append(ch if ch.isalnum() or ch == "_" else "_")

    result = "".join(out)
    if keyword.iskeyword(result):
        result += "_"
    return result
