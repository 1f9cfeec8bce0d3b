"""Syntax tree nodes, node kinds and tree traversal helpers."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import Optional


class NodeType(IntEnum):
    """Every kind of syntax tree node, in a fixed order."""

    # Program structure
    PROGRAM = 0
    MODULE = auto()
    IMPORT = auto()
    EXPORT = auto()

    # Declarations
    FUNCTION = auto()
    VARIABLE_DECLARATION = auto()
    STRUCT = auto()
    ENUM = auto()
    UNION = auto()
    PARAMETER = auto()
    PARAMETER_LIST = auto()

    # Types
    TYPE = auto()
    POINTER_TYPE = auto()
    ARRAY_TYPE = auto()

    # Statements
    BLOCK = auto()
    EXPRESSION_STATEMENT = auto()
    RETURN_STATEMENT = auto()
    IF_STATEMENT = auto()
    WHILE_STATEMENT = auto()
    FOR_STATEMENT = auto()
    DO_WHILE_STATEMENT = auto()
    SWITCH_STATEMENT = auto()
    CASE_STATEMENT = auto()
    DEFAULT_STATEMENT = auto()
    BREAK_STATEMENT = auto()
    CONTINUE_STATEMENT = auto()

    # Expressions
    ASSIGNMENT = auto()
    BINARY_OP = auto()
    UNARY_OP = auto()
    POSTFIX_OP = auto()
    TERNARY = auto()
    FUNCTION_CALL = auto()
    ARRAY_ACCESS = auto()
    MEMBER_ACCESS = auto()
    SIZEOF = auto()

    # Literals
    NUMBER_LITERAL = auto()
    FLOAT_LITERAL = auto()
    STRING_LITERAL = auto()
    CHAR_LITERAL = auto()
    BOOL_LITERAL = auto()
    NULL_LITERAL = auto()

    # Identifiers and values
    IDENTIFIER = auto()
    ENUM_VALUE = auto()

    # Casts and conversions
    CAST = auto()
    TYPE_CONVERSION = auto()


@dataclass
class Node:
    """A syntax tree node: a kind, an optional text value, children and literal data."""

    type: NodeType
    value: Optional[str] = None
    children: list[Node] = field(default_factory=list)
    int_value: int = 0
    float_value: float = 0.0
    bool_value: bool = False
    line: int = 0
    column: int = 0

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.children)

    def add_child(self, child: Node) -> None:
        """Append a child node."""
        self.children.append(child)

    def insert_child(self, index: int, child: Node) -> None:
        """Insert a child at a position from 0 up to the current child count."""
        if not 0 <= index <= len(self.children):
            raise IndexError(f"child index {index} out of range")
        self.children.insert(index, child)

    def remove_child(self, index: int) -> Node:
        """Remove and return the child at the given position."""
        if not 0 <= index < len(self.children):
            raise IndexError(f"child index {index} out of range")
        return self.children.pop(index)

    def child(self, index: int) -> Optional[Node]:
        """Return the child at the given position, or None if there is none."""
        if 0 <= index < len(self.children):
            return self.children[index]
        return None

    def copy(self) -> Node:
        """Return a deep copy of this node and its whole subtree."""
        return Node(
            type=self.type,
            value=self.value,
            children=[c.copy() for c in self.children],
            int_value=self.int_value,
            float_value=self.float_value,
            bool_value=self.bool_value,
            line=self.line,
            column=self.column,
        )

    def walk(self) -> Iterator[Node]:
        """Yield this node and all its descendants in pre-order."""
        yield self
        for c in self.children:
            yield from c.walk()

    def visit(self, visitor: Callable[[Node], object]) -> None:
        """Call the visitor on every node of the subtree in pre-order."""
        for node in self.walk():
            visitor(node)

    def find_by_type(self, node_type: NodeType) -> Optional[Node]:
        """Return the first node of the given kind in pre-order, or None."""
        return next((n for n in self.walk() if n.type == node_type), None)

    def find_by_value(self, value: str) -> Optional[Node]:
        """Return the first node carrying the given value in pre-order, or None."""
        return next(
            (n for n in self.walk() if n.value is not None and n.value == value),
            None,
        )

    def validate(self) -> bool:
        """Check the child counts of this subtree against each node kind's shape."""
        if not all(c.validate() for c in self.children):
            return False
        count = len(self.children)
        if self.type == NodeType.FUNCTION:
            return count >= 2
        if self.type == NodeType.BINARY_OP:
            return count == 2
        if self.type == NodeType.UNARY_OP:
            return count == 1
        if self.type == NodeType.IF_STATEMENT:
            return 2 <= count <= 3
        if self.type == NodeType.WHILE_STATEMENT:
            return count == 2
        if self.type == NodeType.FOR_STATEMENT:
            return 3 <= count <= 4
        return True

    def format(self, indent: int = 0) -> str:
        """Render the subtree as indented text, one node per line."""
        lines: list[str] = []
        self._format_into(lines, indent)
        return "".join(lines)

    def _format_into(self, lines: list[str], indent: int) -> None:
        text = "  " * indent + node_type_name(self.type)
        if self.value is not None:
            text += f": {self.value}"
        if self.type == NodeType.NUMBER_LITERAL:
            text += f" ({self.int_value})"
        elif self.type == NodeType.FLOAT_LITERAL:
            text += f" ({self.float_value:f})"
        elif self.type == NodeType.BOOL_LITERAL:
            text += f" ({'true' if self.bool_value else 'false'})"
        lines.append(text + "\n")
        for c in self.children:
            c._format_into(lines, indent + 1)


def literal_node(
    node_type: NodeType,
    value: Optional[str],
    int_value: int = 0,
    float_value: float = 0.0,
    bool_value: bool = False,
) -> Node:
    """Create a node carrying literal data."""
    return Node(
        type=node_type,
        value=value,
        int_value=int_value,
        float_value=float_value,
        bool_value=bool_value,
    )


def node_type_name(node_type: int) -> str:
    """Upper-case name of a node kind, or 'UNKNOWN' for an unrecognised value."""
    try:
        return NodeType(node_type).name
    except ValueError:
        return "UNKNOWN"


def is_literal_node(node_type: int) -> bool:
    """True for literal node kinds."""
    return NodeType.NUMBER_LITERAL <= node_type <= NodeType.NULL_LITERAL


def is_statement_node(node_type: int) -> bool:
    """True for statement node kinds."""
    return NodeType.BLOCK <= node_type <= NodeType.CONTINUE_STATEMENT


def is_expression_node(node_type: int) -> bool:
    """True for expression kinds, literals and identifiers."""
    return (
        NodeType.ASSIGNMENT <= node_type <= NodeType.SIZEOF
        or is_literal_node(node_type)
        or node_type == NodeType.IDENTIFIER
    )


def is_declaration_node(node_type: int) -> bool:
    """True for declaration node kinds."""
    return NodeType.FUNCTION <= node_type <= NodeType.PARAMETER_LIST


def print_ast(node: Optional[Node], indent: int = 0) -> None:
    """Print the subtree as indented text to standard output."""
    if node is None:
        return
    print(node.format(indent), end="")