"""Directory walking and per-file dispatch to the outline extractors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

from . import config
from .models import Node, NodeKind, ParseOptions
from .parser import parser_for

logger = logging.getLogger(__name__)


def outline_file(file_path: Path, options: ParseOptions, level: int = 0) -> Node:
    """Build a ``File`` node whose children are the file's outline.

    Unreadable files and extractor failures are logged and leave the node
    without children.
    """
    node = Node(name=file_path.name, kind=NodeKind.FILE, path=str(file_path), level=level)
    parser = parser_for(file_path)
    if parser is None:
        logger.debug("No extractor for %s", file_path)
        return node
    try:
        node.children = parser.parse_file(file_path, options, level=level + 1)
    except OSError as exc:
        logger.warning("Could not read %s: %s", file_path, exc)
    except Exception as exc:
        logger.warning("Failed to outline %s: %s", file_path, exc)
    return node


def scan_path(
    path: Path,
    options: ParseOptions,
    extensions: Optional[Iterable[str]] = None,
    skip_dirs: Optional[Iterable[str]] = None,
) -> Node:
    """Outline a single file or a whole directory tree.

    Directories become ``Folder`` nodes (sub-folders first, then files, each
    sorted by name ignoring case); folders without matching files are pruned
    except for the root.
    """
    exts = {e.lower() for e in (extensions or config.DEFAULT_EXTENSIONS)}
    skip = set(skip_dirs if skip_dirs is not None else config.SKIP_DIRS)

    if path.is_file():
        return outline_file(path, options)

    root = _scan_dir(path, options, exts, skip, level=0)
    if root is None:
        root = Node(name=path.name or str(path), kind=NodeKind.FOLDER, path=str(path))
    return root


def _scan_dir(
    directory: Path,
    options: ParseOptions,
    extensions: Set[str],
    skip_dirs: Set[str],
    level: int,
) -> Optional[Node]:
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        logger.warning("Cannot list %s: %s", directory, exc)
        return None

    folders: List[Node] = []
    files: List[Node] = []
    for entry in sorted(entries, key=lambda p: p.name.lower()):
        if entry.is_dir():
            if entry.name in skip_dirs or entry.name.startswith("."):
                continue
            sub = _scan_dir(entry, options, extensions, skip_dirs, level + 1)
            if sub is not None:
                folders.append(sub)
        elif entry.suffix.lower() in extensions:
            files.append(outline_file(entry, options, level=level + 1))

    if not folders and not files:
        return None
    logger.debug("Scanned %s: %d folders, %d files", directory, len(folders), len(files))
    return Node(
        name=directory.name or str(directory),
        kind=NodeKind.FOLDER,
        path=str(directory),
        level=level,
        children=folders + files,
    )


def count_kinds(root: Node) -> dict:
    """Tally nodes by kind across a whole tree."""
    counts: dict = {}
    stack = [root]
    while stack:
        node = stack.pop()
        counts[node.kind] = counts.get(node.kind, 0) + 1
        stack.extend(node.children)
    return counts
