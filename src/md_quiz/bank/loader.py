"""Read question documents from the local filesystem."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..core.files import parse_extensions, read_text_file
from ..errors import DocumentLoadError

__all__ = [
    "DEFAULT_EXTENSIONS",
    "DEFAULT_MAX_BYTES",
    "load_document",
]

DEFAULT_EXTENSIONS: tuple[str, ...] = ("md", "markdown")
DEFAULT_MAX_BYTES = 10 * 1024 * 1024

_LOGGER = logging.getLogger(__name__)


def load_document(
    path: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    max_bytes: int = DEFAULT_MAX_BYTES,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Return the text of ``path`` after extension and size checks."""

    log = logger or _LOGGER
    source = Path(path).expanduser()
    allowed = parse_extensions(extensions, default=DEFAULT_EXTENSIONS)

    if not source.exists():
        raise DocumentLoadError(f"Document not found: {source}")
    if not source.is_file():
        raise DocumentLoadError(f"Document is not a file: {source}")
    suffix = source.suffix.lower().lstrip(".")
    if suffix not in allowed:
        expected = ", ".join(f".{ext}" for ext in sorted(allowed))
        raise DocumentLoadError(
            f"Unsupported document type '{source.suffix or source.name}'. "
            f"Expected one of: {expected}."
        )
    size = source.stat().st_size
    if size == 0:
        raise DocumentLoadError(f"Document is empty: {source}")
    if size > max_bytes:
        raise DocumentLoadError(
            f"Document too large: {size} bytes (maximum {max_bytes})."
        )

    try:
        text = read_text_file(source)
    except OSError as exc:
        raise DocumentLoadError(f"Failed to read {source}: {exc}") from exc

    log.info(
        "Loaded question document",
        extra={"source": str(source), "size_bytes": size},
    )
    return text
