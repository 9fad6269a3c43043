"""File helpers for reading question documents."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Set

__all__ = [
    "parse_extensions",
    "read_text_file",
]

_BOM = "\ufeff"


def parse_extensions(
    values: Optional[Sequence[str]],
    *,
    default: Optional[Iterable[str]] = None,
) -> Set[str]:
    """Normalize extension strings to a lowercase set without leading dots.

    Parameters
    ----------
    values:
        Raw extension inputs (with or without leading dots).
        ``None`` or an empty sequence returns the default set.
    default:
        Fallback extensions when ``values`` is empty. Defaults to
        ``{"md", "markdown"}``.
    """
    fallback = set(default or {"md", "markdown"})
    if not values:
        return set(fallback)

    normalized: Set[str] = set()
    for item in values:
        if not isinstance(item, str):
            continue
        candidate = item.strip().lower().lstrip(".")
        if candidate:
            normalized.add(candidate)
    return normalized or set(fallback)


def read_text_file(path: Path) -> str:
    """Read a UTF-8 document, replacing undecodable bytes.

    A leading byte-order mark is dropped and Windows line endings are
    normalised to ``\\n``.
    """
    with Path(path).open(
        "r", encoding="utf-8", errors="replace", newline=None
    ) as fh:
        text = fh.read()
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return text
