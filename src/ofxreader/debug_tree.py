from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree as RichTree

from .config import DEFAULT_ENCODING
from .detect import inspect_header
from .errors import OFXError
from .reader import load_tree
from .tree import Container, Leaf, Node


def _label(node: Node) -> str:
    if isinstance(node, Leaf):
        return f"[bold]{escape(node.name)}[/bold] = {escape(repr(node.value))}"
    return f"[bold cyan]{escape(node.name)}[/bold cyan] ({len(node.children)})"


def build_tree_view(node: Node, view: Optional[RichTree] = None) -> RichTree:
    """
    Rich rendering of the normalized tree: containers with their child count,
    leaves with their value.
    """
    branch = RichTree(_label(node)) if view is None else view.add(_label(node))
    if isinstance(node, Container):
        for child in node.children:
            build_tree_view(child, branch)
    return branch


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Print the normalized element tree of an OFX file")
    ap.add_argument("file", help="OFX path")
    ap.add_argument("--encoding", default=DEFAULT_ENCODING, help="File encoding")
    args = ap.parse_args(argv)

    console = Console()
    try:
        text = Path(args.file).read_text(encoding=args.encoding)
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"ERROR: cannot read {args.file} as {args.encoding}: {exc}", style="bold red", markup=False)
        return 1

    try:
        info = inspect_header(text)
        root = load_tree(text)
    except OFXError as exc:
        console.print(f"ERROR: {exc}", style="bold red", markup=False)
        return 1

    console.print(f"dialect: {info.dialect.value}")
    for key, value in info.header.items():
        console.print(f"  {key}:{value}")
    console.print(build_tree_view(root))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
