"""Turn a payment sheet into a CPA-005 debit (PAD) or credit (PDS) file.

The conversion runs Start -> Header -> Details -> Trailer -> Done. Running
counters live in a ``Totals`` value that each step replaces, so two
conversions never share state. Any error stops the run; nothing is written
until every record has rendered.
"""

import os
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ach_config import ConversionOptions
from ach_errors import OutputWriteError, RowInvalid, UnknownRecordMode
from ach_records import Detail, Header, Payment, PaymentDirection, Trailer
from ach_sheet import Sheet, read_sheet, sheet_from_records
from ach_validation import RowStatus, parse_amount, validate, validate_metadata
from logging_setup import get_logger

logger = get_logger("cpa005.converter")

RECORD_MODES = {
    "PAD": PaymentDirection.DEBIT,
    "PDS": PaymentDirection.CREDIT,
}


class AssemblerState(Enum):
    START = "start"
    EMITTING_HEADER = "emitting_header"
    EMITTING_DETAILS = "emitting_details"
    EMITTING_TRAILER = "emitting_trailer"
    DONE = "done"


def direction_for(record_mode):
    """Map ``"PAD"``/``"PDS"`` (any case) to a payment direction."""
    if isinstance(record_mode, PaymentDirection):
        return record_mode
    try:
        return RECORD_MODES[str(record_mode).strip().upper()]
    except KeyError:
        raise UnknownRecordMode(record_mode) from None


@dataclass(frozen=True)
class Totals:
    """Next record sequence number plus the amount and count of emitted details."""

    sequence: int = 1
    amount: Decimal = Decimal("0")
    count: int = 0

    def advance(self):
        return replace(self, sequence=self.sequence + 1)

    def add(self, amount):
        return Totals(self.sequence + 1, self.amount + amount, self.count + 1)


@dataclass
class ConversionResult:
    direction: PaymentDirection
    metadata: object
    header: Header
    details: List[Detail]
    trailer: Trailer
    rendered: List[str]
    suspended_rows: List[int] = field(default_factory=list)
    rejected_rows: List[RowInvalid] = field(default_factory=list)
    end_of_data_row: Optional[int] = None
    state: AssemblerState = AssemblerState.DONE

    @property
    def records(self):
        return [self.header, *self.details, self.trailer]

    @property
    def total_amount(self):
        if self.direction is PaymentDirection.DEBIT:
            return self.trailer.debit_amount
        return self.trailer.credit_amount

    @property
    def total_count(self):
        if self.direction is PaymentDirection.DEBIT:
            return self.trailer.debit_count
        return self.trailer.credit_count

    def text(self, delimiter="\n"):
        return delimiter.join(self.rendered)

    def to_bytes(self, delimiter="\n", encoding="ascii"):
        try:
            return self.text(delimiter).encode(encoding)
        except UnicodeEncodeError as e:
            raise OutputWriteError(f"Output is not {encoding}: {e}") from e

    def payment_rows(self):
        """One plain dict per payment, for previews and reports."""
        rows = []
        for detail in self.details:
            for p in detail.payments:
                rows.append({
                    "Sequence": detail.sequence,
                    "Customer No": p.customer_no,
                    "Customer Name": p.customer_name,
                    "Transit": p.transit,
                    "Account": p.account_no,
                    "Amount": p.amount,
                })
        return rows


def _payment(row, metadata):
    return Payment(
        transaction_code=metadata.transaction_code,
        amount=parse_amount(row.amount, row.row_index),
        payment_date=metadata.payment_date,
        bank=row.bank.text(),
        branch=row.branch.text(),
        account_no=row.account.text(),
        client_short_name=metadata.client_short_name,
        customer_name=row.customer_name.text(),
        client_long_name=metadata.client_name,
        client_no=metadata.client_number,
        customer_no=row.customer_no.text(),
    )


def _trailer(totals, metadata, direction):
    if direction is PaymentDirection.DEBIT:
        totals_fields = {"debit_amount": totals.amount, "debit_count": totals.count}
    else:
        totals_fields = {"credit_amount": totals.amount, "credit_count": totals.count}
    return Trailer(
        sequence=totals.sequence,
        client_no=metadata.client_number,
        file_no=totals.sequence,
        **totals_fields,
    )


def assemble(sheet, record_mode, options=None):
    """Build and render every record of the file for ``sheet``.

    ``sheet`` is a ``Sheet`` or a sequence of raw rows laid out like one.
    Returns a ``ConversionResult``; raises a ``ConversionError`` subclass on
    the first problem, except invalid rows when ``options.on_invalid_row`` is
    ``"skip"``.
    """
    options = options or ConversionOptions()
    if not isinstance(sheet, Sheet):
        sheet = sheet_from_records(sheet)
    direction = direction_for(record_mode)

    state = AssemblerState.START
    metadata = validate_metadata(sheet.metadata(), options.encoding)

    state = AssemblerState.EMITTING_HEADER
    totals = Totals()
    header = Header(
        sequence=totals.sequence,
        client_no=metadata.client_number,
        file_no=totals.sequence,
        file_date=options.file_date,
        processing_centre=metadata.processing_centre,
        currency_code=metadata.currency_code,
    )
    rendered = [header.render()]
    totals = totals.advance()

    state = AssemblerState.EMITTING_DETAILS
    details, suspended, rejected = [], [], []
    end_of_data_row = None
    for row in sheet.rows():
        try:
            status = validate(row, options.encoding)
        except RowInvalid as e:
            if options.on_invalid_row == "abort":
                raise
            logger.warning("Skipping invalid row: %s", e)
            rejected.append(e)
            continue

        if status is RowStatus.END_OF_DATA:
            end_of_data_row = row.row_index
            logger.debug("End of data at row %d", row.row_index)
            break
        if status is RowStatus.SUSPENDED:
            logger.debug("Row %d is suspended", row.row_index)
            suspended.append(row.row_index)
            continue

        detail = Detail(
            direction=direction,
            sequence=totals.sequence,
            client_no=metadata.client_number,
            file_no=totals.sequence,
            payments=(_payment(row, metadata),),
        )
        rendered.append(detail.render())
        details.append(detail)
        totals = totals.add(detail.total_amount)

    state = AssemblerState.EMITTING_TRAILER
    trailer = _trailer(totals, metadata, direction)
    rendered.append(trailer.render())

    state = AssemblerState.DONE
    logger.info(
        "Built %s file for client %s: %d payments totalling %s, %d suspended, %d skipped",
        "PAD" if direction is PaymentDirection.DEBIT else "PDS",
        metadata.client_number, totals.count, totals.amount, len(suspended), len(rejected),
    )
    return ConversionResult(
        direction=direction,
        metadata=metadata,
        header=header,
        details=details,
        trailer=trailer,
        rendered=rendered,
        suspended_rows=suspended,
        rejected_rows=rejected,
        end_of_data_row=end_of_data_row,
        state=state,
    )


def convert(sheet, record_mode, options=None):
    """Convert ``sheet`` to the bytes of a CPA-005 file."""
    options = options or ConversionOptions()
    result = assemble(sheet, record_mode, options)
    return result.to_bytes(options.record_delimiter, options.encoding)


def write_records(result, sink, options=None):
    """Write the rendered records of ``result`` to a binary sink."""
    options = options or ConversionOptions()
    delimiter = options.record_delimiter.encode(options.encoding)
    try:
        for i, record in enumerate(result.rendered):
            if i:
                sink.write(delimiter)
            sink.write(record.encode(options.encoding))
    except UnicodeEncodeError as e:
        raise OutputWriteError(f"Output is not {options.encoding}: {e}") from e
    except OSError as e:
        raise OutputWriteError(f"Could not write output: {e}") from e


def convert_file(input_path, output_path, record_mode, options=None):
    """Read a sheet from ``input_path`` and write the file to ``output_path``.

    Output goes to a ``.part`` file renamed into place, so a failed run
    leaves no output file behind.
    """
    options = options or ConversionOptions()
    result = assemble(read_sheet(input_path), record_mode, options)

    output_path = Path(output_path)
    partial = output_path.with_name(output_path.name + ".part")
    try:
        try:
            with open(partial, "wb") as sink:
                write_records(result, sink, options)
            os.replace(partial, output_path)
        except OSError as e:
            raise OutputWriteError(f"Could not write {output_path}: {e}") from e
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    logger.info("Wrote %d records to %s", len(result.rendered), output_path)
    return result
