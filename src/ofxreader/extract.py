from __future__ import annotations

import datetime
import logging
from typing import Optional, Sequence

from .config import (
    ACCOUNT_PATHS,
    AVAILABLE_BALANCE_PATH,
    CURRENCY_PATH,
    LEDGER_BALANCE_PATH,
    SIGNON_PATH,
    TRANSACTION_LIST_PATH,
)
from .errors import InvalidValueError, StructuralError, UnsupportedFeatureError
from .models import (
    ZERO_DATE,
    Account,
    AccountType,
    Balance,
    BankAccountType,
    CorrectionAction,
    Document,
    SignOn,
    Statement,
    Transaction,
    TransactionType,
)
from .parse import lookup_enum, parse_amount, parse_date, parse_int
from .segment import StatementSection, segment_statements
from .tree import Node, Tree, find_all, find_first, value_of


logger = logging.getLogger(__name__)

# First present value wins; each override may be a scalar or a <CURSYM> aggregate
CURRENCY_OVERRIDES = ("CURRENCY", "CURRENCY/CURSYM", "ORIGCURRENCY", "ORIGCURRENCY/CURSYM")


def _required(node: Node, path: str, where: str) -> str:
    value = value_of(node, path)
    if value is None:
        raise StructuralError(f"Missing required element {path} in {where}", path=f"{where}/{path}")
    return value


def _optional(node: Node, path: str) -> Optional[str]:
    return value_of(node, path) or None


def _first_present(node: Node, paths: Sequence[str]) -> Optional[str]:
    for path in paths:
        value = _optional(node, path)
        if value:
            return value
    return None


def _date(node: Node, path: str, where: str) -> datetime.date:
    return parse_date(value_of(node, path), field=f"{where}/{path}")


def build_sign_on(node: Node, where: str = SIGNON_PATH) -> SignOn:
    code = _required(node, "STATUS/CODE", where)
    return SignOn(
        status_code=parse_int(code, field=f"{where}/STATUS/CODE"),
        status_severity=value_of(node, "STATUS/SEVERITY") or "",
        server_date=_date(node, "DTSERVER", where),
        language=value_of(node, "LANGUAGE") or "",
        institution_id=_first_present(node, ("INTU.BID", "FI/FID")) or "",
    )


def build_account(node: Node, account_type: AccountType, where: str) -> Account:
    """
    BANKACCTFROM / CCACCTFROM (or the *ACCTTO counterparts inside a transaction).
    Bank accounts must name a known ACCTTYPE; there is no default subtype.
    """
    if account_type in (AccountType.ACCOUNTS_PAYABLE, AccountType.ACCOUNTS_RECEIVABLE):
        raise UnsupportedFeatureError(f"{account_type.name} account type not supported ({where})")

    account_id = _required(node, "ACCTID", where)
    account_key = _optional(node, "ACCTKEY")

    if account_type is AccountType.CREDIT_CARD:
        return Account(account_id=account_id, account_key=account_key, account_type=account_type)

    # bank
    bank_id = _required(node, "BANKID", where)
    branch_id = _required(node, "BRANCHID", where)
    raw_subtype = _required(node, "ACCTTYPE", where)
    subtype = lookup_enum(BankAccountType, raw_subtype, field=f"{where}/ACCTTYPE")
    if subtype is BankAccountType.NA:
        raise InvalidValueError(
            f"Unrecognized {where}/ACCTTYPE value {raw_subtype!r}",
            path=f"{where}/ACCTTYPE",
            value=raw_subtype,
        )

    return Account(
        account_id=account_id,
        account_key=account_key,
        account_type=account_type,
        bank_id=bank_id,
        branch_id=branch_id,
        bank_account_type=subtype,
    )


def _counterparty(node: Node, where: str) -> Optional[Account]:
    bank_to = find_first(node, "BANKACCTTO")
    if bank_to is not None:
        return build_account(bank_to, AccountType.BANK, f"{where}/BANKACCTTO")
    card_to = find_first(node, "CCACCTTO")
    if card_to is not None:
        return build_account(card_to, AccountType.CREDIT_CARD, f"{where}/CCACCTTO")
    return None


def build_transaction(node: Node, default_currency: str, where: str) -> Transaction:
    """One STMTTRN. Any bad field aborts the whole document."""
    trntype = lookup_enum(TransactionType, _required(node, "TRNTYPE", where), field=f"{where}/TRNTYPE")
    amount = parse_amount(_required(node, "TRNAMT", where), field=f"{where}/TRNAMT")
    fitid = _required(node, "FITID", where)

    raw_action = _optional(node, "CORRECTACTION")
    action = (
        lookup_enum(CorrectionAction, raw_action, field=f"{where}/CORRECTACTION")
        if raw_action
        else CorrectionAction.NONE
    )

    return Transaction(
        transaction_type=trntype,
        date_posted=_date(node, "DTPOSTED", where),
        amount=amount,
        transaction_id=fitid,
        date_user=_date(node, "DTUSER", where),
        date_available=_date(node, "DTAVAIL", where),
        memo=_optional(node, "MEMO"),
        name=_first_present(node, ("NAME", "PAYEE/NAME")),
        corrected_transaction_id=_optional(node, "CORRECTFITID"),
        correction_action=action,
        server_transaction_id=_optional(node, "SRVRTID"),
        check_number=_optional(node, "CHECKNUM"),
        reference_number=_optional(node, "REFNUM"),
        sic=_optional(node, "SIC"),
        payee_id=_optional(node, "PAYEEID"),
        currency=_first_present(node, CURRENCY_OVERRIDES) or default_currency,
        counterparty=_counterparty(node, where),
    )


def build_balance(statement_node: Node, where: str) -> Balance:
    ledger = find_first(statement_node, LEDGER_BALANCE_PATH)
    if ledger is None:
        raise StructuralError(
            f"Balance information not found: missing {LEDGER_BALANCE_PATH} in {where}",
            path=f"{where}/{LEDGER_BALANCE_PATH}",
        )
    ledger_where = f"{where}/{LEDGER_BALANCE_PATH}"
    ledger_amount = parse_amount(_required(ledger, "BALAMT", ledger_where), field=f"{ledger_where}/BALAMT")
    ledger_date = parse_date(_required(ledger, "DTASOF", ledger_where), field=f"{ledger_where}/DTASOF")

    available = find_first(statement_node, AVAILABLE_BALANCE_PATH)
    if available is None:
        # some banks never send AVAILBAL
        return Balance(ledger_balance=ledger_amount, ledger_balance_date=ledger_date)

    avail_where = f"{where}/{AVAILABLE_BALANCE_PATH}"
    return Balance(
        ledger_balance=ledger_amount,
        ledger_balance_date=ledger_date,
        available_balance=parse_amount(_required(available, "BALAMT", avail_where), field=f"{avail_where}/BALAMT"),
        available_balance_date=_date(available, "DTASOF", avail_where),
    )


def build_statement(section: StatementSection) -> Statement:
    node, where, account_type = section.node, section.where, section.account_type

    currency = _optional(node, CURRENCY_PATH)
    if not currency:
        raise StructuralError(f"Currency not found: missing {CURRENCY_PATH} in {where}", path=f"{where}/{CURRENCY_PATH}")

    account_path = ACCOUNT_PATHS[account_type.value]
    account_node = find_first(node, account_path)
    if account_node is None:
        raise StructuralError(
            f"Account information not found: missing {account_path} in {where}",
            path=f"{where}/{account_path}",
        )
    account = build_account(account_node, account_type, f"{where}/{account_path}")

    tranlist = find_first(node, TRANSACTION_LIST_PATH)
    if tranlist is None:
        logger.debug("no %s in %s", TRANSACTION_LIST_PATH, where)
        start, end, transactions = ZERO_DATE, ZERO_DATE, ()
    else:
        list_where = f"{where}/{TRANSACTION_LIST_PATH}"
        start = _date(tranlist, "DTSTART", list_where)
        end = _date(tranlist, "DTEND", list_where)
        transactions = tuple(
            build_transaction(tx, currency, f"{list_where}/STMTTRN[{i}]")
            for i, tx in enumerate(find_all(tranlist, "STMTTRN"))
        )

    return Statement(
        account_type=account_type,
        currency=currency,
        start_date=start,
        end_date=end,
        account=account,
        balance=build_balance(node, where),
        transactions=transactions,
    )


def extract(tree: Tree) -> Document:
    signon_node = tree.find_first(SIGNON_PATH)
    if signon_node is None:
        raise StructuralError(f"Sign On information not found ({SIGNON_PATH})", path=SIGNON_PATH)
    sign_on = build_sign_on(signon_node)

    statements = tuple(build_statement(s) for s in segment_statements(tree))
    logger.debug(
        "extracted %d statement(s), %d transaction(s)",
        len(statements),
        sum(len(s.transactions) for s in statements),
    )
    return Document(sign_on=sign_on, statements=statements)
