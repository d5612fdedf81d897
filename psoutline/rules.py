"""Line-level pattern rules for the PowerShell outline extractor.

Every rule works on a single trimmed line (or, for ``param(`` blocks, on a
run of lines) so it can be exercised on its own.  Matching is
case-insensitive, like the shell.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

# Words that look like ``name(...) {`` inside a class body but open a
# statement block rather than a method.
CONTROL_KEYWORDS = frozenset({
    "if", "elseif", "else", "while", "for", "foreach", "do", "switch",
    "try", "catch", "finally",
    # statements that also take a parenthesised operand
    "param", "return", "throw", "until", "trap",
})

_CLASS_RE = re.compile(r"^class\s+([A-Za-z_]\w*)", re.IGNORECASE)
_FUNCTION_RE = re.compile(r"^function\s+([\w][\w:.-]*)", re.IGNORECASE)
_TYPED_METHOD_RE = re.compile(
    r"^(?:(?:static|hidden)\s+)*\[((?:[^\[\]]|\[[^\[\]]*\])+)\]\s*(\w*)\s*\(",
    re.IGNORECASE,
)
_BARE_METHOD_RE = re.compile(
    r"^(?:(?:static|hidden)\s+)*(\w*)\s*\(.*\)\s*\{?\s*$",
    re.IGNORECASE,
)

# ``[Parameter(...)]``, ``[CmdletBinding()]`` and any ``[Name(...)]``
# validation attribute; none of these are types.
_ATTRIBUTE_RE = re.compile(
    r"\[\s*(?:Parameter|CmdletBinding)\b(?:[^\[\]]|\[[^\[\]]*\])*\]"
    r"|\[\s*[\w.]+\s*\((?:[^\[\]]|\[[^\[\]]*\])*\)\s*\]",
    re.IGNORECASE,
)
_TYPE_RE = re.compile(r"\[\s*((?:[^\[\]]|\[[^\[\]]*\])+?)\s*\]")
_PARAM_NAME_RE = re.compile(r"\$(\w+)")
_PARAM_BLOCK_RE = re.compile(r"(?<![\w$-])param\s*\(", re.IGNORECASE)
_VARIABLE_RE = re.compile(r"^\$(\w+)\s*=(?!=)")

# automatic constants, seen as $true etc. in attribute arguments split over lines
_CONSTANTS = frozenset({"true", "false", "null"})


@dataclass(frozen=True)
class FunctionStart:
    name: str
    return_type: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.return_type:
            return f"[{self.return_type}] {self.name}"
        return self.name


@dataclass(frozen=True)
class ParamInfo:
    name: str
    type_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.type_name:
            return f"{self.name} : {self.type_name}"
        return self.name


class BraceCounter:
    """Tracks ``{``/``}`` depth across lines for one block.

    Closing braces seen before the first opening brace are ignored.
    """

    def __init__(self) -> None:
        self.depth = 0
        self.opened = False

    def feed(self, line: str) -> bool:
        """Consume *line*; return True as soon as the block has closed."""
        for ch in line:
            if ch == "{":
                self.depth += 1
                self.opened = True
            elif ch == "}" and self.opened:
                self.depth -= 1
                if self.depth == 0:
                    return True
        return False


def match_class_start(line: str) -> Optional[str]:
    """Return the class name when *line* opens a class declaration."""
    m = _CLASS_RE.match(line)
    return m.group(1) if m else None


def is_method_name(name: str) -> bool:
    return bool(name) and name.lower() not in CONTROL_KEYWORDS


def match_function_start(line: str, in_class: bool) -> Optional[FunctionStart]:
    """Recognise a function or method signature line.

    ``function Name`` is accepted anywhere.  Inside a class body two more
    forms are accepted: ``[ReturnType] Name(`` and a bare ``Name(...)``
    optionally followed by ``{`` (constructors and untyped methods).
    """
    m = _FUNCTION_RE.match(line)
    if m:
        return FunctionStart(m.group(1))
    if not in_class:
        return None

    m = _TYPED_METHOD_RE.match(line)
    if m:
        name = m.group(2)
        if is_method_name(name):
            return FunctionStart(name, m.group(1).strip())
        return None

    m = _BARE_METHOD_RE.match(line)
    if m:
        name = m.group(1)
        if is_method_name(name) and name[0].isalpha():
            return FunctionStart(name)
    return None


def inline_parameter_list(line: str) -> Optional[str]:
    """Text between the outermost parentheses of a signature line.

    Returns None when the line carries no parenthesised list or the list
    names no ``$`` variables (``Name()``, ``function Foo {``).
    """
    start = line.find("(")
    end = line.rfind(")")
    if start == -1 or end <= start:
        return None
    inner = line[start + 1:end]
    return inner if "$" in inner else None


def parse_parameter(text: str) -> Optional[ParamInfo]:
    """Extract ``[type]$name`` from one parameter declaration."""
    text = _ATTRIBUTE_RE.sub(" ", text)
    name_match = _PARAM_NAME_RE.search(text)
    if not name_match or name_match.group(1).lower() in _CONSTANTS:
        return None
    type_match = _TYPE_RE.search(text[:name_match.start()])
    type_name = type_match.group(1) if type_match else None
    return ParamInfo(name_match.group(1), type_name)


def parse_parameter_tokens(text: str) -> List[ParamInfo]:
    """Split a comma separated parameter list into parameters."""
    text = _ATTRIBUTE_RE.sub(" ", text)
    params: List[ParamInfo] = []
    for part in text.split(","):
        param = parse_parameter(part)
        if param is not None:
            params.append(param)
    return params


def has_param_block(line: str) -> bool:
    return _PARAM_BLOCK_RE.search(line) is not None


def scan_param_block(lines: Sequence[str], start: int) -> Tuple[List[ParamInfo], int]:
    """Collect parameters from the ``param(`` block opening on ``lines[start]``.

    Parenthesis depth is tracked until the block closes; the index of the
    closing line is returned with the parameters (the last index when the
    block never closes).
    """
    params: List[ParamInfo] = []
    depth = 0
    for index in range(start, len(lines)):
        segment = lines[index].strip()
        if index == start:
            m = _PARAM_BLOCK_RE.search(segment)
            if m is None:
                return params, start
            segment = segment[m.end():]
            depth = 1

        closed_at = None
        for pos, ch in enumerate(segment):
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    closed_at = pos
                    break

        if closed_at is not None:
            params.extend(parse_parameter_tokens(segment[:closed_at]))
            return params, index
        params.extend(parse_parameter_tokens(segment))
    return params, len(lines) - 1


def match_variable_assignment(line: str) -> Optional[str]:
    """Return the variable name for a ``$name = ...`` line."""
    m = _VARIABLE_RE.match(line)
    return m.group(1) if m else None
