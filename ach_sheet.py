"""Payment sheet reading.

A payment sheet keeps the file-level values in the first rows (label in
column A, value in column B) and one payment per row after the column
headings::

    Client Name       | ACME HOLDINGS
    Client Number     | 0123456789
    Processing Centre | 00320
    Currency Code     | CAD
    Payment Date      | 2024/03/15
    Transaction Code  | 450
    Customer No | Customer Name | Bank | Branch | Account | Amount | Suspend
    1001        | JANE DOE      | 003  | 00012  | 1234567 | 100.00 |

Raw cells are resolved once into ``Cell`` values so nothing downstream has
to guess whether a spreadsheet handed it a number, a string or nothing.
"""

import csv
import io
import math
import numbers
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path

import pandas as pd

from ach_errors import SheetReadError
from logging_setup import get_logger

logger = get_logger("cpa005.sheet")

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
CSV_SUFFIXES = (".csv", ".txt")


class CellKind(Enum):
    TEXT = "text"
    NUMBER = "number"
    EMPTY = "empty"


@dataclass(frozen=True)
class Cell:
    kind: CellKind
    value: object = None

    @classmethod
    def from_raw(cls, raw):
        if raw is None:
            return EMPTY
        if isinstance(raw, (datetime, date)):
            if pd.isna(raw):
                return EMPTY
            return cls(CellKind.TEXT, raw.strftime("%Y/%m/%d"))
        if isinstance(raw, numbers.Number) and not isinstance(raw, bool):
            if isinstance(raw, float) and math.isnan(raw):
                return EMPTY
            if isinstance(raw, numbers.Integral):
                return cls(CellKind.NUMBER, Decimal(int(raw)))
            return cls(CellKind.NUMBER, Decimal(str(raw)))
        if raw is pd.NA or raw is pd.NaT:
            return EMPTY
        text = str(raw).strip()
        if not text:
            return EMPTY
        return cls(CellKind.TEXT, text)

    @property
    def is_empty(self):
        return self.kind is CellKind.EMPTY

    def text(self):
        """Canonical string form; whole numbers lose their ``.0``."""
        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.NUMBER:
            if self.value == self.value.to_integral_value():
                return str(int(self.value))
            return str(self.value)
        return self.value


EMPTY = Cell(CellKind.EMPTY)


@dataclass(frozen=True)
class SheetLayout:
    """Fixed 1-based positions of the metadata cells and payment columns."""

    label_column: int = 1
    value_column: int = 2
    metadata_rows: dict = field(default_factory=lambda: {
        "client_name": (1, "Client Name"),
        "client_number": (2, "Client Number"),
        "processing_centre": (3, "Processing Centre"),
        "currency_code": (4, "Currency Code"),
        "payment_date": (5, "Payment Date"),
        "transaction_code": (6, "Transaction Code"),
    })
    first_data_row: int = 8
    columns: dict = field(default_factory=lambda: {
        "customer_no": 1,
        "customer_name": 2,
        "bank": 3,
        "branch": 4,
        "account": 5,
        "amount": 6,
        "suspend": 7,
    })


DEFAULT_LAYOUT = SheetLayout()


@dataclass(frozen=True)
class SheetMetadata:
    client_name: Cell
    client_number: Cell
    processing_centre: Cell
    currency_code: Cell
    payment_date: Cell
    transaction_code: Cell
    layout: SheetLayout = DEFAULT_LAYOUT

    def position(self, name):
        row, _ = self.layout.metadata_rows[name]
        return row, self.layout.value_column


@dataclass(frozen=True)
class InputRow:
    row_index: int
    customer_no: Cell
    customer_name: Cell
    bank: Cell
    branch: Cell
    account: Cell
    amount: Cell
    suspend: Cell


class Sheet:
    """A grid of resolved cells addressed by 1-based row and column."""

    def __init__(self, cells, layout=DEFAULT_LAYOUT):
        self._cells = cells
        self.layout = layout

    def __len__(self):
        return len(self._cells)

    def cell(self, row, col):
        if row < 1 or col < 1 or row > len(self._cells):
            return EMPTY
        line = self._cells[row - 1]
        if col > len(line):
            return EMPTY
        return line[col - 1]

    def metadata(self):
        values = {}
        for name, (row, label) in self.layout.metadata_rows.items():
            found = self.cell(row, self.layout.label_column).text()
            if found and found.rstrip(":").strip().lower() != label.lower():
                logger.warning("Row %d is labelled %r, expected %r", row, found, label)
            values[name] = self.cell(row, self.layout.value_column)
        return SheetMetadata(layout=self.layout, **values)

    def rows(self):
        """Yield payment rows from the first data row to the end of the sheet."""
        for row in range(self.layout.first_data_row, len(self._cells) + 1):
            yield InputRow(
                row_index=row,
                **{name: self.cell(row, col) for name, col in self.layout.columns.items()},
            )


def sheet_from_records(records, layout=DEFAULT_LAYOUT):
    """Build a sheet from plain rows of raw values (lists or tuples)."""
    return Sheet([[Cell.from_raw(v) for v in row] for row in records], layout)


def sheet_from_frame(frame, layout=DEFAULT_LAYOUT):
    return sheet_from_records(frame.itertuples(index=False, name=None), layout)


def _suffix(source, filename):
    name = filename or getattr(source, "name", None) or (source if isinstance(source, (str, Path)) else "")
    return Path(str(name)).suffix.lower()


def _read_text(source):
    if hasattr(source, "read"):
        data = source.read()
        return data.decode("utf-8-sig") if isinstance(data, bytes) else data
    return Path(source).read_text(encoding="utf-8-sig")


def _read_csv(source):
    text = _read_text(source)
    # Metadata rows are narrower than payment rows; size the frame to the widest
    width = max((len(r) for r in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        return pd.DataFrame()
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )


def read_sheet(source, filename=None, layout=DEFAULT_LAYOUT):
    """Read the first worksheet of an Excel file, or a CSV file, into a ``Sheet``.

    ``source`` is a path or a binary file-like object (an upload); pass
    ``filename`` when the object does not carry a usable ``name``.
    """
    suffix = _suffix(source, filename)
    try:
        if suffix in EXCEL_SUFFIXES:
            frame = pd.read_excel(source, header=None, dtype=object, sheet_name=0)
        elif suffix in CSV_SUFFIXES:
            frame = _read_csv(source)
        else:
            raise SheetReadError(
                f"Unsupported file type {suffix or '(none)'!r}; upload an Excel or CSV file"
            )
    except SheetReadError:
        raise
    except (OSError, ValueError, ImportError, zipfile.BadZipFile) as e:
        raise SheetReadError(f"Could not read {filename or source}: {e}") from e
    logger.debug("Read %d rows from %s", len(frame), filename or source)
    return sheet_from_frame(frame, layout)
