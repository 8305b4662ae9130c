"""Check where each directive of a parsed configuration may appear.

Every directive name has one or more rules. A rule gives the depths,
exclusive at both ends, at which the directive may sit in the tree. It
also lists the blocks it may sit directly inside. A rule with no parents
is for top-level directives only.
"""

from __future__ import annotations

import dataclasses
import ipaddress
import os
import sys
from typing import Iterable, Mapping, Sequence

from .config_tree import (
    ConfigSyntaxError,
    IllegalGetterError,
    Node,
    parse_config_file,
)

DEFAULT_PORT = 8080
LOCALHOST = 2130706433
MAX_CLIENTS = 1000
BUF_SIZE = 100000
FD_MAX = 50
DEFAULT_CONFIG_PATH = "./config_files/default.conf"
USAGE = "Usage : ./webserv [configuration file]"
INVALID_MESSAGE = (
    "Invalid configuration file : Directives are not supported or in wrong Context."
)


@dataclasses.dataclass
class Listen:
    """Where a server listens."""

    address: int = LOCALHOST
    port: int = DEFAULT_PORT
    default_server: str = ""

    @property
    def host(self) -> str:
        """The address in dotted form."""
        return str(ipaddress.IPv4Address(self.address))


@dataclasses.dataclass
class ErrorPage:
    """The page served for a set of error codes."""

    uri: str = ""
    error_codes: list[int] = dataclasses.field(default_factory=list)


class InvalidDirectiveError(ValueError):
    """A directive is unknown or stands in the wrong context."""

    def __init__(self, name: str, depth: int, parent: str | None) -> None:
        self.name = name
        self.depth = depth
        self.parent = parent
        where = parent if parent is not None else "NO PARENT"
        super().__init__(f"error for {name} : {depth} (parent: {where})")


@dataclasses.dataclass(frozen=True)
class DirectiveRule:
    """The allowed depths and enclosing blocks of one directive."""

    min_level: int = 0
    max_level: int = 0
    parents: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))

    def is_valid(self, level: int, parent: str | None) -> bool:
        """Whether a directive at ``level`` inside ``parent`` obeys this rule."""
        if not self.min_level < level < self.max_level:
            return False
        if parent is not None and parent in self.parents:
            return True
        return not self.parents and parent is None


def default_rules() -> dict[str, list[DirectiveRule]]:
    """The directives a configuration may use, with where each may appear."""
    rules: dict[str, list[DirectiveRule]] = {"server": [DirectiveRule(0, 2, ())]}
    in_server = ("server",)
    for name, max_level in (("listen", 4), ("server_name", 4), ("location", 6)):
        rules[name] = [DirectiveRule(2, max_level, in_server)]
    in_block = ("server", "location")
    for name in (
        "index",
        "root",
        "autoindex",
        "error_page",
        "method",
        "client_max_body_size",
        "cgi",
        "cgi_pass",
    ):
        rules[name] = [DirectiveRule(2, 6, in_block)]
    return rules


def _parent_name(node: Node) -> str | None:
    holder = node.parent.parent if node.parent is not None else None
    if holder is not None and holder.args:
        return holder.args[0]
    return None


def check_directive(
    node: Node, rules: Mapping[str, Iterable[DirectiveRule]] | None = None
) -> None:
    """Raise InvalidDirectiveError unless the directive node is allowed where it is."""
    if not node.args:
        return
    rules = default_rules() if rules is None else rules
    name = node.args[0]
    parent = _parent_name(node)
    candidates = rules.get(name)
    if candidates is None:
        raise InvalidDirectiveError(name, node.depth, parent)
    if not any(rule.is_valid(node.depth, parent) for rule in candidates):
        raise InvalidDirectiveError(name, node.depth, parent)


def validate_tree(
    root: Node, rules: Mapping[str, Iterable[DirectiveRule]] | None = None
) -> list[str]:
    """Check every directive below ``root``; return their names in visiting order."""
    rules = default_rules() if rules is None else rules
    visited: list[str] = []
    _walk(root, rules, visited)
    return visited


def _walk(
    block: Node, rules: Mapping[str, Iterable[DirectiveRule]], visited: list[str]
) -> None:
    try:
        entries = block.direct_children_map()
    except IllegalGetterError as exc:
        raise InvalidDirectiveError(" ".join(block.args), block.depth, None) from exc
    for entry in entries.values():
        try:
            occurrences = entry.direct_children_list()
        except IllegalGetterError as exc:
            raise InvalidDirectiveError(" ".join(entry.args), entry.depth, None) from exc
        for occurrence in occurrences:
            check_directive(entry, rules)
            if entry.args:
                visited.append(entry.args[0])
            _walk(occurrence, rules, visited)


def validate_config_file(path: str | os.PathLike) -> Node:
    """Parse a configuration file, check its directives and return its tree."""
    root = parse_config_file(path)
    validate_tree(root)
    return root


def main(argv: Sequence[str] | None = None) -> int:
    """Validate a configuration file (the default one unless named) and print it."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print(USAGE)
        return 0
    if args:
        path = args[0]
    else:
        path = DEFAULT_CONFIG_PATH
        print("Taking default configuration file")
    try:
        root = validate_config_file(path)
    except OSError:
        print("File innaccessible or non existing")
        return 1
    except ConfigSyntaxError:
        print("The configuration file contains syntax errors")
        return 1
    except InvalidDirectiveError as exc:
        print(exc, file=sys.stderr)
        print(INVALID_MESSAGE)
        return 1
    print("Print result " + root.render())
    return 0


if __name__ == "__main__":
    sys.exit(main())