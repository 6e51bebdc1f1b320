#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Syntax tree for the declarative subset of Gradle build scripts.

Nodes are built by the grammar in :mod:`.grammar` and read by
:class:`~.mapper.ConfigurationMapper`. Line numbers are 1-based.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class Node:
    line: int = field(default=0, kw_only=True)


@dataclass
class Literal(Node):
    value: Any


@dataclass
class ListNode(Node):
    items: List[Node]


@dataclass
class Name(Node):
    name: str


@dataclass
class Attribute(Node):
    receiver: Node
    name: str


@dataclass
class Index(Node):
    receiver: Node
    key: Node


@dataclass
class Block(Node):
    statements: List[Node] = field(default_factory=list)


@dataclass
class Call(Node):
    callee: Node
    args: List[Node] = field(default_factory=list)
    kwargs: Dict[str, Node] = field(default_factory=dict)
    block: Optional[Block] = None


@dataclass
class Assignment(Node):
    target: Node
    value: Node


@dataclass
class Declaration(Node):
    name: str
    value: Optional[Node] = None


@dataclass
class Skipped(Node):
    """A statement the parser did not understand."""

    text: str


def dotted_path(node: Node) -> Optional[Tuple[str, ...]]:
    """``a.b.c`` as ``("a", "b", "c")``; None if the node is not a plain name chain."""
    if isinstance(node, Name):
        return (node.name,)
    if isinstance(node, Attribute):
        head = dotted_path(node.receiver)
        return head + (node.name,) if head is not None else None
    return None


def render(node: Node) -> str:
    """Source-like text for a node, used in diagnostics."""
    match node:
        case Literal(value=str() as value):
            return f'"{value}"'
        case Literal(value=value):
            return "null" if value is None else str(value).lower() if isinstance(value, bool) else str(value)
        case ListNode(items=items):
            return "[" + ", ".join(render(item) for item in items) + "]"
        case Name(name=name):
            return name
        case Attribute(receiver=receiver, name=name):
            return f"{render(receiver)}.{name}"
        case Index(receiver=receiver, key=key):
            return f"{render(receiver)}[{render(key)}]"
        case Call(callee=callee, args=args, kwargs=kwargs):
            parts = [render(arg) for arg in args]
            parts.extend(f"{key} = {render(value)}" for key, value in kwargs.items())
            return f"{render(callee)}({', '.join(parts)})"
        case Skipped(text=text):
            return text
        case _:
            return node.__class__.__name__


