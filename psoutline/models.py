"""Core data models shared by the script and JSON outline extractors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple


class NodeKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"
    CLASS = "class"
    FUNCTION = "function"
    CONTAINER = "container"
    PARAMETER = "parameter"
    VARIABLE = "variable"
    OBJECT = "object"
    ARRAY_ITEM = "array_item"
    PROPERTY = "property"
    ERROR = "error"


@dataclass
class Node:
    """One structural element of an outline.

    ``lines`` holds raw source lines for functions, or a one-line summary
    for JSON objects/arrays. ``item_kind`` is only set on containers and
    names the kind of leaf they group (parameters or variables).
    """

    name: str
    kind: NodeKind
    path: str = ""
    level: int = 0
    expanded: bool = False
    lines: List[str] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    item_kind: Optional[NodeKind] = None

    def container(self, item_kind: NodeKind) -> Optional["Node"]:
        """Return the child container grouping *item_kind* leaves, if any."""
        for child in self.children:
            if child.kind is NodeKind.CONTAINER and child.item_kind is item_kind:
                return child
        return None


@dataclass(frozen=True)
class ParseOptions:
    """Resolved parsing toggles passed explicitly to every extraction call."""

    parse_parameter_types: bool = True
    parse_variable_assignments: bool = True
    expand_function_details: bool = True
    show_parameters: bool = True
    show_variables: bool = True
    show_function_names: bool = True


def iter_visible_rows(nodes: Iterable[Node], depth: int = 0) -> Iterator[Tuple[int, Node]]:
    """Depth-first pre-order walk that only descends into expanded nodes.

    Yields ``(depth, node)`` pairs, depth counted from the given forest.
    The walk keeps one sibling iterator per open level instead of recursing,
    so arbitrarily deep trees are fine.
    """
    stack: List[Tuple[int, Iterator[Node]]] = [(depth, iter(nodes))]
    while stack:
        level, siblings = stack[-1]
        node = next(siblings, None)
        if node is None:
            stack.pop()
            continue
        yield level, node
        if node.expanded and node.children:
            stack.append((level + 1, iter(node.children)))


def iter_visible(nodes: Iterable[Node]) -> Iterator[Node]:
    for _, node in iter_visible_rows(nodes):
        yield node


def set_expanded(nodes: Iterable[Node], expanded: bool) -> None:
    """Set the ``expanded`` flag on every node of the forest."""
    stack = list(nodes)
    while stack:
        node = stack.pop()
        node.expanded = expanded
        stack.extend(node.children)
