from __future__ import annotations

import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from ofxreader.errors import HeaderError, NormalizationError, OFXError, ParseError, UnsupportedFeatureError
from ofxreader.models import AccountType, BankAccountType, CorrectionAction, TransactionType
from ofxreader.reader import load_tree, parse
from ofxreader.tree import from_xml


SAMPLES = Path(__file__).resolve().parents[1] / "samples"

HEADER = "\n".join(
    [
        "OFXHEADER:100",
        "DATA:OFXSGML",
        "VERSION:102",
        "SECURITY:NONE",
        "ENCODING:USASCII",
        "CHARSET:1252",
        "COMPRESSION:NONE",
        "OLDFILEUID:NONE",
    ]
)

MINIMAL_BODY = """
<OFX>
<SIGNONMSGSRSV1>
<SONRS>
<STATUS>
<CODE>0
<SEVERITY>INFO
</STATUS>
<DTSERVER>20240131
<LANGUAGE>ENG
</SONRS>
</SIGNONMSGSRSV1>
<BANKMSGSRSV1>
<STMTTRNRS>
<TRNUID>1
<STMTRS>
<CURDEF>USD
<BANKACCTFROM>
<BANKID>001
<BRANCHID>01
<ACCTID>42
<ACCTTYPE>CHECKING
</BANKACCTFROM>
<BANKTRANLIST>
<DTSTART>20240101
<DTEND>20240131
<STMTTRN>
<TRNTYPE>CREDIT
<DTPOSTED>20240115
<TRNAMT>50.00
<FITID>TX1
</STMTTRN>
</BANKTRANLIST>
<LEDGERBAL>
<BALAMT>50.00
<DTASOF>20240131
</LEDGERBAL>
</STMTRS>
</STMTTRNRS>
</BANKMSGSRSV1>
</OFX>
"""


def _read(name: str) -> str:
    return (SAMPLES / name).read_text(encoding="cp1252")


def test_minimal_legacy_statement_end_to_end():
    doc = parse(HEADER + "\n\n" + MINIMAL_BODY)

    assert doc.sign_on.status_code == 0
    assert len(doc.statements) == 1
    stmt = doc.statements[0]
    assert len(stmt.transactions) == 1
    tx = stmt.transactions[0]
    assert tx.amount == Decimal("50.00")
    assert tx.transaction_type is TransactionType.CREDIT
    assert tx.transaction_id == "TX1"
    assert tx.currency == "USD"


def test_wrong_header_version_returns_no_document():
    with pytest.raises(HeaderError):
        parse(HEADER.replace("VERSION:102", "VERSION:151") + "\n\n" + MINIMAL_BODY)


def test_unterminated_legacy_document():
    with pytest.raises(NormalizationError):
        parse(HEADER + "\n\n" + MINIMAL_BODY.replace("</OFX>", ""))


def test_error_taxonomy():
    assert issubclass(HeaderError, ParseError)
    assert issubclass(ParseError, OFXError)
    assert issubclass(UnsupportedFeatureError, OFXError)
    assert not issubclass(UnsupportedFeatureError, ParseError)


def test_bank_legacy_sample():
    doc = parse(_read("bank_legacy.ofx"))

    assert doc.sign_on.status_severity == "INFO"
    assert doc.sign_on.server_date == datetime.date(2024, 1, 31)
    assert doc.sign_on.institution_id == "00341"

    assert len(doc.statements) == 1
    stmt = doc.statements[0]
    assert stmt.account_type is AccountType.BANK
    assert stmt.account.account_id == "987654321"
    assert stmt.account.branch_id == "0042"
    assert stmt.account.bank_account_type is BankAccountType.CHECKING

    assert stmt.balance.ledger_balance == Decimal("1234.56")
    assert stmt.balance.available_balance == Decimal("1200.00")
    assert stmt.balance.available_balance_date == datetime.date(2024, 1, 31)

    ids = [t.transaction_id for t in stmt.transactions]
    assert ids == ["TX1", "TX2", "TX3"], f"Unexpected order: {ids}"
    assert stmt.transactions[0].memo == "Salary & bonus"
    assert stmt.transactions[1].date_user == datetime.date(2024, 1, 9)
    assert stmt.transactions[2].check_number == "1042"
    assert sum(t.amount for t in stmt.transactions) == Decimal("-70.50")


def test_conformant_and_legacy_samples_give_the_same_document():
    legacy = parse(_read("bank_legacy.ofx"))
    conformant = parse(_read("bank_conformant.ofx"))
    assert legacy == conformant


def test_legacy_tree_matches_conformant_tree():
    legacy_root = load_tree(_read("bank_legacy.ofx"))
    text = _read("bank_conformant.ofx")
    conformant_root = from_xml(text[text.index("<"):])
    assert legacy_root == conformant_root


def test_multi_account_sample():
    doc = parse(_read("multi_account.ofx"))

    assert len(doc.statements) >= 2
    bank, card = doc.statements
    assert bank.account_type is AccountType.BANK
    assert card.account_type is AccountType.CREDIT_CARD
    assert doc.sign_on.institution_id == "341"

    # bank side
    assert bank.account.bank_account_type is BankAccountType.SAVINGS
    assert bank.account.branch_id == "1234"
    xfer = bank.transactions[0]
    assert xfer.transaction_type is TransactionType.TRANSFER
    assert xfer.counterparty is not None
    assert xfer.counterparty.account_type is AccountType.CREDIT_CARD
    assert xfer.counterparty.account_id == card.account.account_id
    assert bank.transactions[1].transaction_type is TransactionType.INTEREST
    # no AVAILBAL block
    assert bank.balance.available_balance == Decimal("0")

    # card side
    assert card.account.bank_account_type is BankAccountType.NA
    assert [t.currency for t in card.transactions] == ["BRL", "GBP", "USD"]
    fee = card.transactions[2]
    assert fee.correction_action is CorrectionAction.REPLACE
    assert fee.corrected_transaction_id == "C0"
    assert card.balance.ledger_balance == Decimal("-45.60")


def test_single_line_header_sample():
    doc = parse(_read("single_line_header.ofx"))
    assert len(doc.statements) == 1
    stmt = doc.statements[0]
    assert stmt.account_type is AccountType.CREDIT_CARD
    assert stmt.currency == "EUR"
    assert stmt.transactions[0].amount == Decimal("-9.99")
    assert stmt.balance.available_balance == Decimal("990.01")


def test_conformant_document_with_unknown_message_set():
    text = (
        "<OFX><SIGNONMSGSRSV1><SONRS><STATUS><CODE>0</CODE></STATUS></SONRS></SIGNONMSGSRSV1>"
        "<INVSTMTMSGSRSV1></INVSTMTMSGSRSV1></OFX>"
    )
    with pytest.raises(UnsupportedFeatureError):
        parse(text)


def test_malformed_conformant_document():
    with pytest.raises(NormalizationError):
        parse("<OFX><SIGNONMSGSRSV1></OFX>")


def test_json_dump_round_trips_the_basics():
    payload = parse(_read("bank_legacy.ofx")).model_dump(mode="json")
    stmt = payload["statements"][0]
    assert stmt["account_type"] == "BANK"
    assert stmt["transactions"][0]["transaction_type"] == "CREDIT"
    assert stmt["transactions"][0]["amount"] == "50.00"
    assert stmt["start_date"] == "2024-01-01"


def test_deeply_nested_document_fails_with_a_structured_error():
    depth = 3000
    markup = (
        "".join(f"<E{i}>" for i in range(depth))
        + "<CODE>0</CODE>"
        + "".join(f"</E{i}>" for i in reversed(range(depth)))
    )
    with pytest.raises(OFXError):
        parse(markup)
