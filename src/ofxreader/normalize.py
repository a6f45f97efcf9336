from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from .errors import NormalizationError
from .tree import Container, Leaf, Node


logger = logging.getLogger(__name__)

DECLARATION_RE = re.compile(r"<[!?][^>]*>")
TAG_RE = re.compile(r"<(/?)([^<>/\s]+)[^<>]*?(/?)>")
TEXT_RE = re.compile(r"[^<]+")


@dataclass
class _Open:
    name: str
    children: List[Node] = field(default_factory=list)


def _tokens(markup: str) -> Iterator[Tuple[str, str, int]]:
    """Yields (kind, value, offset); kind is start, end, empty or text."""
    pos = 0
    n = len(markup)
    while pos < n:
        m = DECLARATION_RE.match(markup, pos)
        if m:
            pos = m.end()
            continue
        m = TAG_RE.match(markup, pos)
        if m:
            closing, name, self_closing = m.groups()
            if closing:
                yield "end", name, pos
            elif self_closing:
                yield "empty", name, pos
            else:
                yield "start", name, pos
            pos = m.end()
            continue
        m = TEXT_RE.match(markup, pos)
        if m:
            yield "text", m.group(0), pos
            pos = m.end()
            continue
        raise NormalizationError(f"Stray '<' at offset {pos}")


def normalize(markup: str) -> Node:
    """
    Repairs legacy OFX tag soup into a well-formed tree, without a DTD:
    - `<TAG>value` is a leaf, closed as soon as its text is seen
    - a later `</TAG>` naming the most recently auto-closed leaf is redundant and consumed
    - any other end tag closes the open element, which becomes a container
    """
    stack: List[_Open] = []
    roots: List[Node] = []
    # (name, depth of its parent) for leaves closed by their text
    auto_closed: List[Tuple[str, int]] = []

    def attach(node: Node) -> None:
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)

    for kind, value, offset in _tokens(markup):
        if kind == "start":
            stack.append(_Open(value))

        elif kind == "empty":
            attach(Leaf(value, ""))

        elif kind == "text":
            text = value.strip()
            if not text:
                continue
            if not stack:
                raise NormalizationError(f"Text outside any element at offset {offset}: {text[:40]!r}")
            top = stack[-1]
            if top.children:
                raise NormalizationError(
                    f"Unexpected text inside <{top.name}> after child elements at offset {offset}: {text[:40]!r}",
                    path=top.name,
                )
            stack.pop()
            attach(Leaf(top.name, html.unescape(text)))
            auto_closed.append((top.name, len(stack)))

        else:
            if auto_closed and auto_closed[-1] == (value, len(stack)):
                auto_closed.pop()
                continue
            if not stack:
                raise NormalizationError(f"Unmatched end tag </{value}> at offset {offset}", path=value)
            top = stack.pop()
            if top.name != value:
                logger.debug("end tag </%s> at offset %d closes open element <%s>", value, offset, top.name)
            # leaves recorded inside the closed element can no longer be closed redundantly
            while auto_closed and auto_closed[-1][1] > len(stack):
                auto_closed.pop()
            if top.children:
                attach(Container(top.name, tuple(top.children)))
            else:
                attach(Leaf(top.name, ""))

    if stack:
        deepest = stack[-1].name
        open_path = "/".join(o.name for o in stack)
        raise NormalizationError(f"Unclosed element <{deepest}> at end of input ({open_path})", path=open_path)

    if len(roots) != 1:
        raise NormalizationError(f"Expected exactly one top-level element, found {len(roots)}")

    logger.debug("normalized legacy markup into <%s> (%d top-level children)", roots[0].name,
                 len(roots[0].children) if isinstance(roots[0], Container) else 0)
    return roots[0]
