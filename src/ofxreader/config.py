# ofxreader/config.py
from typing import Dict, Tuple

# Legacy (SGML) header profile, in file order
LEGACY_MARKER = "OFXHEADER:100"

HEADER_PROFILE: Tuple[Tuple[str, str], ...] = (
    ("OFXHEADER", "100"),
    ("DATA", "OFXSGML"),
    ("VERSION", "102"),
    ("SECURITY", "NONE"),
    ("ENCODING", "USASCII"),
    ("CHARSET", "1252"),
    ("COMPRESSION", "NONE"),
    ("OLDFILEUID", "NONE"),
)

# Tolerated after OLDFILEUID, any value
OPTIONAL_HEADER_FIELD = "NEWFILEUID"

# Some exporters write the whole header on one line with no separators
SINGLE_LINE_HEADER = "".join(f"{k}:{v}" for k, v in HEADER_PROFILE)

# Tree paths. "**" matches any number of levels.
SIGNON_PATH = "OFX/SIGNONMSGSRSV1/SONRS"

# Keyed by AccountType value so this module stays free of model imports
MESSAGE_SET_MARKERS: Dict[str, str] = {
    "BANK": "BANKMSGSRSV1",
    "CREDITCARD": "CREDITCARDMSGSRSV1",
}

STATEMENT_PATHS: Dict[str, str] = {
    "BANK": "OFX/BANKMSGSRSV1/**/STMTRS",
    "CREDITCARD": "OFX/CREDITCARDMSGSRSV1/**/CCSTMTRS",
}

ACCOUNT_PATHS: Dict[str, str] = {
    "BANK": "BANKACCTFROM",
    "CREDITCARD": "CCACCTFROM",
}

CURRENCY_PATH = "CURDEF"
TRANSACTION_LIST_PATH = "BANKTRANLIST"
LEDGER_BALANCE_PATH = "LEDGERBAL"
AVAILABLE_BALANCE_PATH = "AVAILBAL"

# CLI: legacy files declare CHARSET:1252
DEFAULT_ENCODING = "cp1252"
