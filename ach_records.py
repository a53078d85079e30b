"""CPA-005 logical records: Header (A), Detail (C/D) and Trailer (Z).

Header and Trailer render to exactly ``LOGICAL_RECORD_LENGTH`` characters;
a Detail is the 24-character prefix followed by its 240-character payment
segments. Field positions in the comments are 1-based, as in the CPA-005
documentation.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Tuple

from ach_fields import alphanumeric, julian_date, money, numeric, spaces, zeros

LOGICAL_RECORD_LENGTH = 1464
RECORD_PREFIX_LENGTH = 24
SEGMENT_LENGTH = 240
MAX_SEGMENTS = 6


class RecordKind(Enum):
    HEADER = "header"
    DETAIL = "detail"
    TRAILER = "trailer"


class PaymentDirection(Enum):
    DEBIT = "debit"
    CREDIT = "credit"


def record_type_char(kind, direction=None):
    """Collapse record kind and payment direction into the one-character tag."""
    if kind is RecordKind.HEADER:
        return "A"
    if kind is RecordKind.TRAILER:
        return "Z"
    if direction is PaymentDirection.DEBIT:
        return "D"
    if direction is PaymentDirection.CREDIT:
        return "C"
    raise ValueError(f"Detail records need a payment direction, got {direction!r}")


def _prefix(kind, direction, sequence, client_no, file_no):
    return (
        record_type_char(kind, direction)                    # Pos 1: Record type (1)
        + numeric(sequence, 9, "record count")               # Pos 2-10: Record count (9)
        + alphanumeric(client_no, 10, "client number")       # Pos 11-20: Originator ID (10)
        + alphanumeric(file_no, 4, "file creation number")   # Pos 21-24: File creation number (4)
    )


def _checked(record, name, length=LOGICAL_RECORD_LENGTH):
    assert len(record) == length, (
        f"{name} record is {len(record)} characters, expected {length}"
    )
    return record


def detail_length(segments):
    return RECORD_PREFIX_LENGTH + SEGMENT_LENGTH * segments


@dataclass(frozen=True)
class Header:
    sequence: int
    client_no: str
    file_no: int
    file_date: date
    processing_centre: str
    currency_code: str

    def render(self):
        record = (
            _prefix(RecordKind.HEADER, None, self.sequence, self.client_no, self.file_no)
            + julian_date(self.file_date, 6, "file creation date")         # Pos 25-30: Creation date (6)
            + numeric(self.processing_centre, 5, "processing centre")      # Pos 31-35: Data centre (5)
            + spaces(20)                                                   # Pos 36-55: Filler (20)
            + alphanumeric(self.currency_code, 3, "currency code")         # Pos 56-58: Currency (3)
            + spaces(1406)                                                 # Pos 59-1464: Filler (1406)
        )
        return _checked(record, "Header")


@dataclass(frozen=True)
class Payment:
    """One 240-character payment segment of a Detail record."""

    transaction_code: str
    amount: Decimal
    payment_date: date
    bank: str
    branch: str
    account_no: str
    client_short_name: str
    customer_name: str
    client_long_name: str
    client_no: str
    customer_no: str
    client_sundry_no: str = ""

    @property
    def transit(self):
        # Institution number (4) followed by branch transit (5)
        return numeric(self.bank, 4, "bank number") + numeric(self.branch, 5, "branch number")

    def render(self):
        segment = (
            alphanumeric(self.transaction_code, 3, "transaction code")      # 1-3: Transaction type (3)
            + money(self.amount, 10, "amount")                              # 4-13: Amount (10)
            + julian_date(self.payment_date, 6, "payment date")             # 14-19: Payment date (6)
            + numeric(self.transit, 9, "institution/transit")               # 20-28: Institution ID (9)
            + alphanumeric(self.account_no, 12, "account number")           # 29-40: Account number (12)
            + zeros(22)                                                     # 41-62: Item trace number (22)
            + zeros(3)                                                      # 63-65: Stored transaction type (3)
            + alphanumeric(self.client_short_name, 15, "client short name") # 66-80: Short name (15)
            + alphanumeric(self.customer_name, 30, "customer name")         # 81-110: Payee/payor name (30)
            + alphanumeric(self.client_long_name, 30, "client long name")   # 111-140: Long name (30)
            + alphanumeric(self.client_no, 10, "client number")             # 141-150: Originator ID (10)
            + alphanumeric(self.customer_no, 19, "customer number")         # 151-169: Cross reference (19)
            + zeros(9)                                                      # 170-178: Return institution (9)
            + spaces(12)                                                    # 179-190: Return account (12)
            + alphanumeric(self.client_sundry_no, 15, "sundry information") # 191-205: Sundry (15)
            + spaces(22)                                                    # 206-227: Filler (22)
            + spaces(2)                                                     # 228-229: Settlement code (2)
            + spaces(11)                                                    # 230-240: Invalid data element (11)
        )
        assert len(segment) == SEGMENT_LENGTH, f"Payment segment is {len(segment)} characters"
        return segment


@dataclass(frozen=True)
class Detail:
    direction: PaymentDirection
    sequence: int
    client_no: str
    file_no: int
    payments: Tuple[Payment, ...]

    def __post_init__(self):
        if not 1 <= len(self.payments) <= MAX_SEGMENTS:
            raise ValueError(
                f"A Detail record holds 1 to {MAX_SEGMENTS} payments, got {len(self.payments)}"
            )

    @property
    def total_amount(self):
        return sum((p.amount for p in self.payments), Decimal("0"))

    def render(self):
        record = _prefix(RecordKind.DETAIL, self.direction, self.sequence, self.client_no, self.file_no)
        record += "".join(p.render() for p in self.payments)
        return _checked(record, "Detail", detail_length(len(self.payments)))


@dataclass(frozen=True)
class Trailer:
    sequence: int
    client_no: str
    file_no: int
    debit_amount: Decimal = Decimal("0")
    debit_count: int = 0
    credit_amount: Decimal = Decimal("0")
    credit_count: int = 0

    def render(self):
        record = (
            _prefix(RecordKind.TRAILER, None, self.sequence, self.client_no, self.file_no)
            + money(self.debit_amount, 14, "total debit amount")    # Pos 25-38: Debit value (14)
            + numeric(self.debit_count, 8, "total debit count")     # Pos 39-46: Debit count (8)
            + money(self.credit_amount, 14, "total credit amount")  # Pos 47-60: Credit value (14)
            + numeric(self.credit_count, 8, "total credit count")   # Pos 61-68: Credit count (8)
            + zeros(1396)                                           # Pos 69-1464: Filler (1396)
        )
        return _checked(record, "Trailer")
