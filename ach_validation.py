"""Checks applied to sheet metadata and payment rows before they become records."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from ach_errors import MetadataInvalid, MetadataMissing, RowInvalid
from ach_sheet import CellKind

SUSPEND_MARKER = "y"
CLIENT_SHORT_NAME_WIDTH = 15
CENTS = Decimal("0.01")

# RBC data centres accepting CPA-005 files
PROCESSING_CENTRES = {
    "00330": "Halifax",
    "00310": "Montreal",
    "00320": "Toronto",
    "00278": "Regina",
    "00370": "Winnipeg",
    "00390": "Calgary",
    "00300": "Vancouver",
}
CURRENCY_CODES = ("CAD", "USD")
DATE_FORMATS = ("%Y/%m/%d", "%Y-%m-%d")


class RowStatus(Enum):
    ACCEPTED = "accepted"
    SUSPENDED = "suspended"
    END_OF_DATA = "end_of_data"


@dataclass(frozen=True)
class FileMetadata:
    client_name: str
    client_number: str
    processing_centre: str
    currency_code: str
    payment_date: date
    transaction_code: str

    @property
    def client_short_name(self):
        return self.client_name[:CLIENT_SHORT_NAME_WIDTH]

    @property
    def processing_centre_name(self):
        return PROCESSING_CENTRES[self.processing_centre]


def _required(metadata, name, label, encoding):
    cell = getattr(metadata, name)
    if cell.is_empty:
        raise MetadataMissing(label, metadata.position(name))
    text = cell.text()
    try:
        text.encode(encoding)
    except UnicodeEncodeError:
        raise MetadataInvalid(label, text, f"has characters outside {encoding}") from None
    return text


def _is_ascii_digits(text):
    return text.isascii() and text.isdigit()


def parse_date(text):
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    raise ValueError(f"expected YYYY/MM/DD, got {text!r}")


def validate_metadata(metadata, encoding="ascii"):
    """Resolve the six file-level cells into a ``FileMetadata``.

    Raises ``MetadataMissing`` for an empty cell and ``MetadataInvalid`` for
    a value that cannot go into a CPA-005 header.
    """
    client_name = _required(metadata, "client_name", "Client Name", encoding)
    if len(client_name) > 30:
        raise MetadataInvalid("Client Name", client_name, "must not exceed 30 characters")

    client_number = _required(metadata, "client_number", "Client Number", encoding)
    if metadata.client_number.kind is CellKind.NUMBER:
        # Excel drops the leading zeros of a number-formatted cell
        client_number = client_number.zfill(10)
    if len(client_number) != 10 or not _is_ascii_digits(client_number):
        raise MetadataInvalid("Client Number", client_number, "must be exactly 10 digits")

    centre = _required(metadata, "processing_centre", "Processing Centre", encoding)
    centre = centre.zfill(5) if _is_ascii_digits(centre) else centre
    if centre not in PROCESSING_CENTRES:
        raise MetadataInvalid(
            "Processing Centre", centre,
            f"expected one of {', '.join(sorted(PROCESSING_CENTRES))}",
        )

    currency = _required(metadata, "currency_code", "Currency Code", encoding).upper()
    if currency not in CURRENCY_CODES:
        raise MetadataInvalid("Currency Code", currency, f"expected {' or '.join(CURRENCY_CODES)}")

    raw_date = _required(metadata, "payment_date", "Payment Date", encoding)
    try:
        payment_date = parse_date(raw_date)
    except ValueError as e:
        raise MetadataInvalid("Payment Date", raw_date, str(e)) from None

    transaction_code = _required(metadata, "transaction_code", "Transaction Code", encoding)
    if len(transaction_code) != 3:
        raise MetadataInvalid("Transaction Code", transaction_code, "must be exactly 3 characters")

    return FileMetadata(
        client_name=client_name,
        client_number=client_number,
        processing_centre=centre,
        currency_code=currency,
        payment_date=payment_date,
        transaction_code=transaction_code,
    )


def parse_amount(cell, row_index=None):
    """Dollar amount of a cell as a non-negative ``Decimal`` with two places.

    Spreadsheet numbers are rounded to the cent; text amounts may carry
    ``$``, thousands separators and spaces but no more than two decimals.
    """
    if cell.is_empty:
        raise RowInvalid(row_index, "amount", "amount is required")
    if cell.kind is CellKind.NUMBER:
        amount = cell.value.quantize(CENTS, rounding=ROUND_HALF_UP)
    else:
        text = cell.text()
        cleaned = "".join(c for c in text if c not in "$, ")
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            raise RowInvalid(row_index, "amount", f"{text!r} is not a number") from None
        if not amount.is_finite():
            raise RowInvalid(row_index, "amount", f"{text!r} is not a number")
        if amount != amount.quantize(CENTS):
            raise RowInvalid(row_index, "amount", f"{text!r} has more than two decimal places")
        amount = amount.quantize(CENTS)
    if amount < 0:
        raise RowInvalid(row_index, "amount", "must not be negative")
    return amount


def _digits(row, name, max_len):
    cell = getattr(row, name)
    text = cell.text()
    if not text:
        raise RowInvalid(row.row_index, name, "is required")
    if not _is_ascii_digits(text):
        raise RowInvalid(row.row_index, name, f"{text!r} must contain digits only")
    if len(text) > max_len:
        raise RowInvalid(row.row_index, name, f"{text!r} exceeds {max_len} digits")
    return text


def _text(row, name, max_len, encoding):
    text = getattr(row, name).text()
    if len(text) > max_len:
        raise RowInvalid(row.row_index, name, f"{text!r} exceeds {max_len} characters")
    try:
        text.encode(encoding)
    except UnicodeEncodeError:
        raise RowInvalid(row.row_index, name, f"{text!r} has characters outside {encoding}") from None
    return text


def is_suspended(row):
    return row.suspend.text().strip().lower() == SUSPEND_MARKER


def validate(row, encoding="ascii"):
    """Classify a payment row.

    Returns ``END_OF_DATA`` when the customer number is empty (no later row is
    read), ``SUSPENDED`` when the suspend column holds ``y``, otherwise checks
    the row's shape and returns ``ACCEPTED``. Shape problems raise
    ``RowInvalid``.
    """
    if row.customer_no.is_empty:
        return RowStatus.END_OF_DATA
    if is_suspended(row):
        return RowStatus.SUSPENDED

    _text(row, "customer_no", 19, encoding)
    _text(row, "customer_name", 30, encoding)
    _digits(row, "bank", 4)
    _digits(row, "branch", 5)
    _digits(row, "account", 12)
    parse_amount(row.amount, row.row_index)
    return RowStatus.ACCEPTED
