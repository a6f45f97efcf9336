from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .config import HEADER_PROFILE, LEGACY_MARKER, OPTIONAL_HEADER_FIELD, SINGLE_LINE_HEADER
from .errors import HeaderError


logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    LEGACY = "legacy"
    CONFORMANT = "conformant"


@dataclass(frozen=True)
class HeaderInfo:
    dialect: Dialect
    markup: str
    header: Dict[str, str] = field(default_factory=dict)


def _split_field(line: str, expected_key: str) -> Tuple[str, str]:
    key, sep, value = line.partition(":")
    if not sep:
        raise HeaderError(f"Malformed header line for {expected_key}: {line!r}", path=expected_key)
    return key.strip(), value.strip()


def _check_fields(lines: List[str]) -> Dict[str, str]:
    header: Dict[str, str] = {}

    for i, (expected_key, expected_value) in enumerate(HEADER_PROFILE):
        if i >= len(lines):
            raise HeaderError(f"Missing header field {expected_key}", path=expected_key)
        key, value = _split_field(lines[i], expected_key)
        if key != expected_key:
            raise HeaderError(f"Incorrect header format: expected {expected_key}, found {key!r}", path=expected_key)
        if value != expected_value:
            raise HeaderError(
                f"Unsupported header {expected_key}: {value!r} ({expected_value} required)",
                path=expected_key,
            )
        header[key] = value

    extra = lines[len(HEADER_PROFILE):]
    if extra:
        key, value = _split_field(extra[0], OPTIONAL_HEADER_FIELD)
        if key != OPTIONAL_HEADER_FIELD:
            raise HeaderError(f"Unexpected header field {key!r}", path=key)
        header[key] = value
    if len(extra) > 1:
        raise HeaderError(f"Unexpected header line after {OPTIONAL_HEADER_FIELD}: {extra[1]!r}", path=extra[1])

    return header


def _check_single_line(line: str) -> Dict[str, str]:
    # Known malformed variant, accepted as a whole
    header = {k: v for k, v in HEADER_PROFILE}
    rest = line[len(SINGLE_LINE_HEADER):]
    if rest.startswith(OPTIONAL_HEADER_FIELD + ":"):
        header[OPTIONAL_HEADER_FIELD] = rest[len(OPTIONAL_HEADER_FIELD) + 1:]
    return header


def _is_single_line(line: str) -> bool:
    if line == SINGLE_LINE_HEADER:
        return True
    return line.startswith(SINGLE_LINE_HEADER + OPTIONAL_HEADER_FIELD + ":")


def inspect_header(text: str) -> HeaderInfo:
    """
    Classifies the document and strips the legacy preamble.
    Legacy when OFXHEADER:100 appears before the first '<'; the preamble then has to
    match the one supported profile exactly.
    """
    start = text.find("<")
    if start == -1:
        raise HeaderError("No markup found in document")

    preamble = text[:start]
    markup = text[start:]

    if LEGACY_MARKER not in preamble:
        logger.debug("conformant dialect detected")
        return HeaderInfo(dialect=Dialect.CONFORMANT, markup=markup)

    lines = [ln.strip() for ln in preamble.splitlines() if ln.strip()]

    if len(lines) == 1 and _is_single_line(lines[0]):
        header = _check_single_line(lines[0])
        logger.debug("legacy dialect detected (single-line header)")
    else:
        header = _check_fields(lines)
        logger.debug("legacy dialect detected (%d header fields)", len(header))

    return HeaderInfo(dialect=Dialect.LEGACY, markup=markup, header=header)
