"""Structural outline extractors for PowerShell scripts and JSON documents.

Both extractors are stateless: all working state lives inside one call, and
the parsing toggles arrive as an immutable :class:`ParseOptions` value.

- ``ScriptStructureExtractor`` runs a single forward pass over the lines of
  a script and builds Class / Function nodes with parameter and variable
  containers, using only the line rules in :mod:`psoutline.rules`.
- ``JsonStructureExtractor`` mirrors an already deserialized JSON value.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from . import rules
from .config import JSON_EXTENSIONS, SCRIPT_EXTENSIONS
from .models import Node, NodeKind, ParseOptions


def read_source(file_path: Path) -> str:
    """Read a file as text, dropping a UTF-8 byte order mark if present."""
    return file_path.read_text(encoding="utf-8-sig", errors="replace")


# ===================================================================
# Abstract Parser Interface
# ===================================================================

class Parser(ABC):
    """Abstract base class for outline extractors."""

    extensions: Set[str] = set()

    @abstractmethod
    def parse_file(
        self,
        file_path: Path,
        options: ParseOptions,
        source: Optional[str] = None,
        level: int = 1,
    ) -> List[Node]:
        """Outline a single file into a forest of nodes."""
        ...

    def supports_extension(self, suffix: str) -> bool:
        """Return True if this parser handles files ending in *suffix*."""
        return suffix.lower() in self.extensions


# ===================================================================
# PowerShell scripts
# ===================================================================

class ScriptStructureExtractor(Parser):
    """Line scanner producing classes, functions, parameters and variables.

    A function signature starts a body sub-scan that runs until its braces
    balance (or the input ends).  The outer pass keeps visiting every line,
    so a ``function`` nested inside another body is reported again as a
    separate function with overlapping lines.
    """

    extensions = SCRIPT_EXTENSIONS

    def parse_file(
        self,
        file_path: Path,
        options: ParseOptions,
        source: Optional[str] = None,
        level: int = 1,
    ) -> List[Node]:
        if source is None:
            source = read_source(file_path)
        return self.extract(source.splitlines(), options, path=str(file_path), level=level)

    def extract(
        self,
        lines: Sequence[str],
        options: ParseOptions,
        path: str = "",
        level: int = 1,
    ) -> List[Node]:
        """Outline *lines*; classes and top-level functions sit at *level*."""
        roots: List[Node] = []
        current_class: Optional[Node] = None
        class_braces = rules.BraceCounter()

        for index, raw in enumerate(lines):
            line = raw.strip()

            class_name = rules.match_class_start(line)
            if class_name:
                current_class = Node(name=class_name, kind=NodeKind.CLASS, path=path, level=level)
                roots.append(current_class)
                class_braces = rules.BraceCounter()
            else:
                start = rules.match_function_start(line, in_class=current_class is not None)
                if start is not None:
                    func_level = level + 1 if current_class is not None else level
                    func = self._build_function(lines, index, start, func_level, options, path)
                    if current_class is not None:
                        current_class.children.append(func)
                    else:
                        roots.append(func)

            if current_class is not None and class_braces.feed(line):
                current_class = None

        return roots

    # ------------------------------------------------------------------
    # Function bodies
    # ------------------------------------------------------------------

    def _build_function(
        self,
        lines: Sequence[str],
        index: int,
        start: rules.FunctionStart,
        level: int,
        options: ParseOptions,
        path: str,
    ) -> Node:
        signature = lines[index]
        body: List[str] = [signature]
        parameters: List[rules.ParamInfo] = []
        assignments: List[Tuple[str, str]] = []

        braces = rules.BraceCounter()
        closed = braces.feed(signature.strip())

        inline = rules.inline_parameter_list(signature.strip())
        if options.parse_parameter_types and inline is not None:
            parameters = rules.parse_parameter_tokens(inline)
        look_for_block = options.parse_parameter_types and inline is None

        cursor = index + 1
        while not closed and cursor < len(lines):
            raw = lines[cursor]
            line = raw.strip()
            body.append(raw)

            if look_for_block and rules.has_param_block(line):
                block, _ = rules.scan_param_block(lines, cursor)
                parameters.extend(block)
                look_for_block = False

            if options.parse_variable_assignments:
                name = rules.match_variable_assignment(line)
                if name:
                    assignments.append((name, line))

            closed = braces.feed(line)
            cursor += 1

        func = Node(
            name=start.display_name,
            kind=NodeKind.FUNCTION,
            path=path,
            level=level,
            lines=[signature] if options.show_function_names else body,
        )

        if options.expand_function_details:
            if options.show_parameters and parameters:
                func.children.append(_parameter_container(parameters, level, path))
            if options.show_variables:
                param_names = {p.name for p in parameters}
                variables = _unique_variables(assignments, param_names, level, path)
                if variables:
                    func.children.append(Node(
                        name=f"Variables ({len(variables)})",
                        kind=NodeKind.CONTAINER,
                        path=path,
                        level=level + 1,
                        children=variables,
                        item_kind=NodeKind.VARIABLE,
                    ))
        return func


def _parameter_container(
    parameters: List[rules.ParamInfo], level: int, path: str,
) -> Node:
    leaves = [
        Node(name=p.display_name, kind=NodeKind.PARAMETER, path=path, level=level + 2)
        for p in parameters
    ]
    return Node(
        name=f"Parameters ({len(leaves)})",
        kind=NodeKind.CONTAINER,
        path=path,
        level=level + 1,
        children=leaves,
        item_kind=NodeKind.PARAMETER,
    )


def _unique_variables(
    assignments: List[Tuple[str, str]], param_names: Set[str], level: int, path: str,
) -> List[Node]:
    """First assignment of each name wins; parameters are not variables."""
    seen: Dict[str, Node] = {}
    for name, line in assignments:
        if name in param_names or name in seen:
            continue
        seen[name] = Node(
            name=name, kind=NodeKind.VARIABLE, path=path, level=level + 2, lines=[line],
        )
    return sorted(seen.values(), key=lambda n: (n.name.lower(), n.name))


# ===================================================================
# JSON documents
# ===================================================================

def format_scalar(value: Any) -> str:
    """Render a JSON scalar the way it is written in JSON text."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def summarize(value: Any) -> str:
    if isinstance(value, list):
        return f"Array with {len(value)} items"
    return f"Object with {len(value)} properties"


class JsonStructureExtractor(Parser):
    """Mirrors a deserialized JSON value as Object/ArrayItem/Property nodes."""

    extensions = JSON_EXTENSIONS

    def parse_file(
        self,
        file_path: Path,
        options: ParseOptions,
        source: Optional[str] = None,
        level: int = 1,
    ) -> List[Node]:
        if source is None:
            source = read_source(file_path)
        return self.parse_text(source, level=level, path=str(file_path))

    def parse_text(self, text: str, level: int = 1, path: str = "") -> List[Node]:
        """Deserialize *text* and extract it; undecodable JSON yields one error node.

        Besides syntax errors this covers integers past the interpreter's
        digit limit (``ValueError``) and nesting deeper than the decoder
        can follow (``RecursionError``).
        """
        try:
            value = json.loads(text)
        except (ValueError, RecursionError) as exc:
            return self.error_forest(f"Invalid JSON: {exc}", level=level, path=path)
        return self.extract(value, level=level, path=path)

    def error_forest(self, message: str, level: int = 1, path: str = "") -> List[Node]:
        return [Node(name=message, kind=NodeKind.ERROR, path=path, level=level)]

    def extract(self, value: Any, level: int = 1, path: str = "") -> List[Node]:
        """Mirror *value* as a forest whose roots sit at *level*.

        Walks with an explicit work stack of ``(value, children, level)``
        so nesting depth is bounded by memory, not the call stack.  Each
        work item fills its own children list in document order.
        """
        roots: List[Node] = []
        stack: List[Tuple[Any, List[Node], int]] = [(value, roots, level)]
        while stack:
            current, out, depth = stack.pop()
            if isinstance(current, dict):
                for key, item in current.items():
                    out.append(self._object_entry(key, item, depth, path))
                    if isinstance(item, (dict, list)):
                        stack.append((item, out[-1].children, depth + 1))
            elif isinstance(current, list):
                for i, item in enumerate(current):
                    out.append(self._array_entry(i, item, depth, path))
                    if isinstance(item, (dict, list)):
                        stack.append((item, out[-1].children, depth + 1))
            else:
                out.append(Node(
                    name=f"value: {format_scalar(current)}",
                    kind=NodeKind.PROPERTY,
                    path=path,
                    level=depth,
                ))
        return roots

    def _object_entry(self, key: str, item: Any, level: int, path: str) -> Node:
        if isinstance(item, (dict, list)):
            return Node(
                name=key,
                kind=NodeKind.OBJECT,
                path=path,
                level=level,
                lines=[summarize(item)],
            )
        return Node(
            name=f"{key}: {format_scalar(item)}",
            kind=NodeKind.PROPERTY,
            path=path,
            level=level,
        )

    def _array_entry(self, index: int, item: Any, level: int, path: str) -> Node:
        composite = isinstance(item, (dict, list))
        return Node(
            name=f"[{index}]",
            kind=NodeKind.ARRAY_ITEM,
            path=path,
            level=level,
            lines=[summarize(item) if composite else format_scalar(item)],
        )


PARSERS: List[Parser] = [ScriptStructureExtractor(), JsonStructureExtractor()]


def parser_for(file_path: Path) -> Optional[Parser]:
    """Pick the extractor responsible for *file_path* by extension."""
    for parser in PARSERS:
        if parser.supports_extension(file_path.suffix):
            return parser
    return None
