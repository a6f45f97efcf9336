from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .errors import NormalizationError


logger = logging.getLogger(__name__)

WILDCARD = "**"


@dataclass(frozen=True)
class Leaf:
    name: str
    value: str


@dataclass(frozen=True)
class Container:
    name: str
    children: Tuple["Node", ...] = ()


Node = Union[Leaf, Container]

PathLike = Union[str, Sequence[str]]


def split_path(path: PathLike) -> Tuple[str, ...]:
    if isinstance(path, str):
        return tuple(seg for seg in path.split("/") if seg)
    return tuple(path)


def children_of(node: Node) -> Tuple[Node, ...]:
    if isinstance(node, Container):
        return node.children
    return ()


def _matches(names: Sequence[str], segments: Sequence[str], i: int = 0, j: int = 0) -> bool:
    if j == len(segments):
        return i == len(names)
    if segments[j] == WILDCARD:
        return any(_matches(names, segments, k, j + 1) for k in range(i, len(names) + 1))
    return i < len(names) and names[i] == segments[j] and _matches(names, segments, i + 1, j + 1)


def _descendants(node: Node, chain: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], Node]]:
    # preorder, so matches come out in document order; explicit stack for deep documents
    pending = [(chain, iter(children_of(node)))]
    while pending:
        parent_chain, children = pending[-1]
        child = next(children, None)
        if child is None:
            pending.pop()
            continue
        child_chain = parent_chain + (child.name,)
        yield child_chain, child
        if isinstance(child, Container):
            pending.append((child_chain, iter(child.children)))


def iter_matches(context: Node, path: PathLike) -> Iterator[Node]:
    """Nodes beneath `context` whose name chain (context excluded) matches `path`."""
    segments = split_path(path)
    if not segments:
        return
    for chain, node in _descendants(context):
        if _matches(chain, segments):
            yield node


def find_first(context: Node, path: PathLike) -> Optional[Node]:
    return next(iter_matches(context, path), None)


def find_all(context: Node, path: PathLike) -> List[Node]:
    return list(iter_matches(context, path))


def value_of(context: Node, path: PathLike) -> Optional[str]:
    """
    Text of the first element matching `path`, or None when it is absent or a container.
    Absence is not an error here; callers decide.
    """
    node = find_first(context, path)
    if isinstance(node, Leaf):
        return node.value
    return None


class Tree:
    """Read-only view over a normalized or directly parsed document."""

    def __init__(self, root: Node) -> None:
        self.root = root
        # virtual parent so absolute paths start with the root's own name
        self._document = Container("#document", (root,))

    def find_first(self, path: PathLike) -> Optional[Node]:
        return find_first(self._document, path)

    def find_all(self, path: PathLike) -> List[Node]:
        return find_all(self._document, path)

    def contains(self, path: PathLike) -> bool:
        return self.find_first(path) is not None


def from_element(elem: ET.Element) -> Node:
    built: List[List[Node]] = [[]]
    pending = [(elem, iter(elem))]
    while pending:
        current, children = pending[-1]
        child = next(children, None)
        if child is not None:
            pending.append((child, iter(child)))
            built.append([])
            continue
        pending.pop()
        kids = built.pop()
        if kids:
            built[-1].append(Container(current.tag, tuple(kids)))
        else:
            built[-1].append(Leaf(current.tag, (current.text or "").strip()))
    return built[0][0]


def from_xml(markup: str) -> Node:
    """Conformant dialect: the markup is already well-formed XML."""
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as exc:
        raise NormalizationError(f"Malformed XML document: {exc}") from exc
    logger.debug("parsed conformant document, root <%s>", root.tag)
    return from_element(root)
