from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import DEFAULT_ENCODING
from .errors import OFXError, UnsupportedFeatureError
from .reader import parse


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Parse an OFX bank / credit card statement into JSON")
    parser.add_argument("file", help="Path to the .ofx / .qfx file")
    parser.add_argument("--out", default="", help="Write JSON here instead of stdout")
    parser.add_argument("--encoding", default=DEFAULT_ENCODING, help=f"File encoding (default {DEFAULT_ENCODING})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    ofx_path = Path(args.file)
    if not ofx_path.exists():
        raise SystemExit(f"File not found: {ofx_path}")

    console = Console(stderr=True)
    console.print(f"Processing: {ofx_path}", style="bold")

    try:
        text = ofx_path.read_text(encoding=args.encoding)
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"ERROR: cannot read {ofx_path} as {args.encoding}: {exc}", style="bold red", markup=False)
        return 1

    try:
        document = parse(text)
    except UnsupportedFeatureError as exc:
        console.print(f"Not supported: {exc}", style="bold yellow", markup=False)
        return 2
    except OFXError as exc:
        console.print(f"ERROR: {exc}", style="bold red", markup=False)
        return 1

    payload = document.model_dump(mode="json")

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"OK -> {out_path}", style="bold green")
    else:
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    total = sum(len(s["transactions"]) for s in payload["statements"])
    console.print(f"Statements: {len(payload['statements'])}  Transactions: {total}", style="bold cyan")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
