"""Parse a brace-delimited configuration file into a tree of nodes.

The tree alternates between two kinds of node. A *map* node holds its
children keyed by their full argument list. Each key leads to a *list*
node that gathers every occurrence of that directive, and each occurrence
is in turn a map node holding whatever its block contains.
"""

from __future__ import annotations

import enum
import os
from typing import Iterable, Sequence


class NodeType(enum.IntFlag):
    """What kind of children a node holds."""

    NO_TYPE = 0x00000001
    HASHMAP = 0x00000010
    LIST = 0x00000100


class ConfigSyntaxError(ValueError):
    """The configuration text is not well formed."""


class IllegalGetterError(TypeError):
    """The node does not hold the kind of children asked for."""

    def __init__(self, message: str = "You don't have the legal type to get this kind of childrens.") -> None:
        super().__init__(message)


class KeyNotFoundError(LookupError):
    """No child is stored under the requested key."""

    def __init__(self, message: str = "The object you are trying to retrieve here are not here.") -> None:
        super().__init__(message)


def _has(current: NodeType, wanted: NodeType) -> bool:
    return (current & wanted) == wanted


class Node:
    """One node of the configuration tree."""

    def __init__(
        self,
        node_type: NodeType = NodeType.NO_TYPE,
        parent: "Node | None" = None,
        depth: int = 0,
        args: Iterable[str] = (),
    ) -> None:
        self.type = NodeType(node_type)
        self.parent = parent
        self.depth = depth
        self.args: list[str] = list(args)
        self._map: dict[str, Node] = {}
        self._list: list[Node] = []

    def __repr__(self) -> str:
        return f"Node({self.type!r}, depth={self.depth}, args={self.args!r})"

    def key(self) -> str:
        """The key this node is stored under: each argument prefixed by ';'."""
        return "".join(";" + arg for arg in self.args)

    def set_type(self, node_type: NodeType) -> None:
        """Give an untyped node its type; a node that has one keeps it."""
        if self.type != NodeType.NO_TYPE:
            return
        self.type = NodeType(node_type)

    def add_node(self, node: "Node") -> "Node":
        """Attach a node below this one and return the map node that holds its block."""
        if _has(self.type, NodeType.HASHMAP):
            key = node.key()
            entry = self._map.get(key)
            if entry is None:
                node.set_type(NodeType.LIST)
                self._map[key] = node
                return node.add_node(Node(NodeType.NO_TYPE, node, node.depth + 1, node.args))
            node.parent = entry
            node.depth = entry.depth + 1
            node.set_type(NodeType.HASHMAP)
            if _has(entry.type, NodeType.HASHMAP):
                raise ConfigSyntaxError(f"cannot add {key!r} here")
            entry._list.append(node)
            return node
        node.set_type(NodeType.HASHMAP)
        self._list.append(node)
        return node

    def same_args(self, other: Sequence[str]) -> bool:
        """Whether this node's arguments equal the given ones, in order."""
        return self.args == list(other)

    def children_by_full_name(self, key: str) -> list["Node"]:
        """Every occurrence stored under a full key such as ';listen;80'."""
        if _has(self.type, NodeType.LIST):
            raise IllegalGetterError()
        entry = self._map.get(key)
        if entry is None:
            raise KeyNotFoundError()
        return entry._list

    def children_by_first_name(self, key: str) -> list["Node"]:
        """Every occurrence of any directive whose first argument is ``key``."""
        if _has(self.type, NodeType.LIST):
            raise IllegalGetterError()
        return [
            child
            for _, entry in sorted(self._map.items())
            if entry.args and entry.args[0] == key
            for child in entry._list
        ]

    def direct_children_list(self) -> list["Node"]:
        """The occurrences held by a list node."""
        if _has(self.type, NodeType.LIST):
            return self._list
        raise IllegalGetterError()

    def direct_children_map(self) -> dict[str, "Node"]:
        """The list nodes held by a map node, ordered by key."""
        if _has(self.type, NodeType.HASHMAP):
            return {key: self._map[key] for key in sorted(self._map)}
        raise IllegalGetterError()

    def render(self) -> str:
        """Write the subtree back out as configuration text."""
        return "".join(self._render(0))

    def _render(self, level: int) -> Iterable[str]:
        indent = "\t" * level
        if _has(self.type, NodeType.HASHMAP):
            children = [self._map[key] for key in sorted(self._map)]
            if self.parent is None:
                for child in children:
                    yield from child._render(level)
            elif children:
                yield f"{indent}{' '.join(self.args)} {{\n"
                for child in children:
                    yield from child._render(level + 1)
                yield f"{indent}}}\n"
            else:
                yield f"{indent}{' '.join(self.args)};\n"
        if _has(self.type, NodeType.LIST):
            for child in self._list:
                yield from child._render(level)


def split_add_to_node(line: str, current: Node) -> Node:
    """Add what one prepared line declares below ``current``; return the new current node."""
    if line.endswith(";"):
        line = line[:-1]
    args: list[str] = []
    for token in line.split():
        if token.startswith("#"):
            return current
        if token == "{":
            if not args:
                raise ConfigSyntaxError("block opened without a name")
            return current.add_node(Node(NodeType.NO_TYPE, current, current.depth + 1, args))
        if token == "}":
            if current.parent is None or current.parent.parent is None:
                raise ConfigSyntaxError("unexpected '}'")
            return current.parent.parent
        args.append(token)
    if args:
        current.add_node(Node(NodeType.NO_TYPE, current, current.depth + 1, args))
    return current


def parse_config_text(text: str) -> Node:
    """Parse configuration text and return the root map node."""
    root = Node(NodeType.HASHMAP)
    current = root
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        current = split_add_to_node(line, current)
    if current is not root:
        raise ConfigSyntaxError("The configuration file contains syntax errors")
    return root


def parse_config_file(path: str | os.PathLike) -> Node:
    """Read and parse a configuration file."""
    with open(path, encoding="utf-8") as handle:
        return parse_config_text(handle.read())