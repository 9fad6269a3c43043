"""CLI entry point for ``mdquiz init``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from ..core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdquiz init",
        description=(
            "Create the mdquiz workspace with its config and logs "
            "directories."
        ),
    )
    parser.add_argument(
        "--workspace",
        "--path",
        dest="workspace",
        type=Path,
        help=(
            "Override the workspace root (defaults to MDQUIZ_HOME or "
            "~/.md-quiz)."
        ),
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 2

    if args.quiet:
        return 0

    created = layout.created
    lines = [
        f"Workspace ready at {layout.home} "
        f"({_format_created(created, 'home')})"
    ]
    if layout.directories:
        lines.append("Subdirectories:")
        width = max(len(name) for name in layout.directories)
        for name, directory in layout.items():
            status = _format_created(created, name)
            lines.append(f"  {name.ljust(width)}  {directory} ({status})")

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
