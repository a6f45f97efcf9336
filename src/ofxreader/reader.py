from __future__ import annotations

import logging

from .detect import Dialect, inspect_header
from .extract import extract
from .models import Document
from .normalize import normalize
from .tree import Node, Tree, from_xml


logger = logging.getLogger(__name__)


def load_tree(text: str) -> Node:
    """Header check + either tag-soup repair or a straight XML parse."""
    info = inspect_header(text)
    if info.dialect is Dialect.LEGACY:
        return normalize(info.markup)
    return from_xml(info.markup)


def parse(text: str) -> Document:
    """
    Parses a complete OFX document held in memory.
    Raises an OFXError subclass on the first problem; never returns a partial Document.
    """
    document = extract(Tree(load_tree(text)))
    logger.debug("parsed document with %d statement(s)", len(document.statements))
    return document
