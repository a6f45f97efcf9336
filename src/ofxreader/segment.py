from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .config import MESSAGE_SET_MARKERS, STATEMENT_PATHS
from .errors import StructuralError, UnsupportedFeatureError
from .models import AccountType
from .tree import Node, Tree


logger = logging.getLogger(__name__)

# Extraction order when several message sets are present
SUPPORTED_ACCOUNT_TYPES = (AccountType.BANK, AccountType.CREDIT_CARD)


@dataclass(frozen=True)
class StatementSection:
    account_type: AccountType
    where: str      # path + index, for error messages
    node: Node      # STMTRS / CCSTMTRS


def detect_account_types(tree: Tree) -> List[AccountType]:
    """Account types announced by a message-set marker anywhere in the document."""
    found = [
        t for t in SUPPORTED_ACCOUNT_TYPES
        if tree.contains(("**", MESSAGE_SET_MARKERS[t.value]))
    ]
    if not found:
        raise UnsupportedFeatureError(
            "Unsupported account type: no "
            + " or ".join(MESSAGE_SET_MARKERS[t.value] for t in SUPPORTED_ACCOUNT_TYPES)
            + " message set found"
        )
    return found


def segment_statements(tree: Tree) -> List[StatementSection]:
    """
    Every statement response, grouped by account type (bank first, then credit card),
    in document order within each type.
    """
    sections: List[StatementSection] = []

    for account_type in detect_account_types(tree):
        path = STATEMENT_PATHS[account_type.value]
        nodes = tree.find_all(path)
        if not nodes:
            raise StructuralError(
                f"No statement responses found for account type {account_type.value} ({path})",
                path=path,
            )
        logger.debug("%d statement(s) under %s", len(nodes), path)
        for i, node in enumerate(nodes):
            sections.append(StatementSection(account_type=account_type, where=f"{path}[{i}]", node=node))

    return sections
