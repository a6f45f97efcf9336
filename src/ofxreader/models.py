from __future__ import annotations

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Sentinel for optional dates that are absent or too short to parse
ZERO_DATE = datetime.date.min


class AccountType(str, Enum):
    BANK = "BANK"
    CREDIT_CARD = "CREDITCARD"
    ACCOUNTS_PAYABLE = "AP"
    ACCOUNTS_RECEIVABLE = "AR"


class BankAccountType(str, Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"
    MONEYMRKT = "MONEYMRKT"
    CREDITLINE = "CREDITLINE"
    # not applicable: any non-bank account
    NA = "NA"


class TransactionType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    INTEREST = "INT"
    DIVIDEND = "DIV"
    FEE = "FEE"
    SERVICE_CHARGE = "SRVCHG"
    DEPOSIT = "DEP"
    ATM = "ATM"
    POS = "POS"
    TRANSFER = "XFER"
    CHECK = "CHECK"
    PAYMENT = "PAYMENT"
    CASH = "CASH"
    DIRECT_DEPOSIT = "DIRECTDEP"
    DIRECT_DEBIT = "DIRECTDEBIT"
    REPEATING_PAYMENT = "REPEATPMT"
    OTHER = "OTHER"


class CorrectionAction(str, Enum):
    NONE = "NA"
    REPLACE = "REPLACE"
    DELETE = "DELETE"


class SignOn(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    status_severity: str
    server_date: datetime.date
    language: str = ""
    institution_id: str = ""


class Account(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_id: str
    account_key: Optional[str] = None
    account_type: AccountType
    bank_id: Optional[str] = None
    branch_id: Optional[str] = None
    bank_account_type: BankAccountType = BankAccountType.NA

    @model_validator(mode="after")
    def _bank_fields(self) -> "Account":
        if self.account_type is AccountType.BANK:
            if self.bank_id is None or self.branch_id is None:
                raise ValueError("bank accounts need bank_id and branch_id")
        elif self.bank_account_type is not BankAccountType.NA:
            raise ValueError("bank_account_type only applies to bank accounts")
        return self


class Balance(BaseModel):
    model_config = ConfigDict(frozen=True)

    ledger_balance: Decimal
    ledger_balance_date: datetime.date
    available_balance: Decimal = Decimal("0")
    available_balance_date: datetime.date = ZERO_DATE


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_type: TransactionType
    date_posted: datetime.date
    amount: Decimal = Field(..., description="Signed amount. Negative=outflow, Positive=inflow")
    transaction_id: str = Field(..., description="FITID")
    date_user: datetime.date = ZERO_DATE
    date_available: datetime.date = ZERO_DATE
    memo: Optional[str] = None
    name: Optional[str] = None
    corrected_transaction_id: Optional[str] = None
    correction_action: CorrectionAction = CorrectionAction.NONE
    server_transaction_id: Optional[str] = None
    check_number: Optional[str] = None
    reference_number: Optional[str] = None
    sic: Optional[str] = None
    payee_id: Optional[str] = None
    currency: str = Field(..., min_length=1, description="Own currency, else the statement default")
    counterparty: Optional[Account] = None


class Statement(BaseModel):
    model_config = ConfigDict(frozen=True)

    account_type: AccountType
    currency: str = Field(..., min_length=1, description="CURDEF")
    start_date: datetime.date
    end_date: datetime.date
    account: Account
    balance: Balance
    transactions: Tuple[Transaction, ...] = ()


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    sign_on: SignOn
    statements: Tuple[Statement, ...] = ()
