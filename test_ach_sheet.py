import io
import logging
from datetime import datetime
from decimal import Decimal

import pandas as pd
import pytest

from ach_errors import SheetReadError
from ach_sheet import Cell, CellKind, read_sheet, sheet_from_records


@pytest.mark.parametrize("raw, kind, text", [
    ("  JANE DOE ", CellKind.TEXT, "JANE DOE"),
    ("", CellKind.EMPTY, ""),
    ("   ", CellKind.EMPTY, ""),
    (None, CellKind.EMPTY, ""),
    (float("nan"), CellKind.EMPTY, ""),
    (1001, CellKind.NUMBER, "1001"),
    (1001.0, CellKind.NUMBER, "1001"),
    (50.25, CellKind.NUMBER, "50.25"),
    (datetime(2024, 3, 15), CellKind.TEXT, "2024/03/15"),
    (pd.Timestamp("2024-03-15"), CellKind.TEXT, "2024/03/15"),
    (pd.NaT, CellKind.EMPTY, ""),
])
def test_cell_resolution(raw, kind, text):
    cell = Cell.from_raw(raw)
    assert cell.kind is kind
    assert cell.text() == text


def test_numbers_are_held_as_decimals():
    assert Cell.from_raw(50.25).value == Decimal("50.25")
    assert Cell.from_raw(7).value == Decimal(7)


def test_sheet_positions(scenario_records):
    sheet = sheet_from_records(scenario_records)

    assert sheet.cell(1, 2).text() == "ACME HOLDINGS LIMITED"
    assert sheet.cell(99, 1).is_empty
    assert sheet.cell(1, 99).is_empty

    rows = list(sheet.rows())
    assert [r.row_index for r in rows] == [8, 9, 10]
    assert rows[0].customer_no.text() == "1001"
    assert rows[0].amount.text() == "100.00"
    assert rows[1].suspend.text() == "y"


def test_unexpected_label_is_logged(make_records, caplog):
    records = make_records([])
    records[3][0] = "Currency"
    with caplog.at_level(logging.WARNING, logger="cpa005.sheet"):
        meta = sheet_from_records(records).metadata()

    assert meta.currency_code.text() == "CAD"
    assert "expected 'Currency Code'" in caplog.text


def test_read_csv(tmp_path, scenario_records):
    path = tmp_path / "payments.csv"
    path.write_text("\n".join(",".join(str(v) for v in r) for r in scenario_records) + "\n")

    sheet = read_sheet(path)
    meta = sheet.metadata()
    rows = list(sheet.rows())

    assert meta.client_number.text() == "0123456789"
    assert rows[0].bank.text() == "003"
    assert rows[0].suspend.is_empty
    assert rows[2].customer_no.is_empty


def test_read_csv_upload_with_filename(scenario_records):
    text = "\n".join(",".join(str(v) for v in r) for r in scenario_records)
    upload = io.BytesIO(text.encode("utf-8-sig"))

    sheet = read_sheet(upload, filename="payments.CSV")

    assert sheet.cell(1, 1).text() == "Client Name"
    assert len(list(sheet.rows())) == 3


def test_read_excel(tmp_path, scenario_records):
    path = tmp_path / "payments.xlsx"
    pd.DataFrame(scenario_records).to_excel(path, header=False, index=False)

    sheet = read_sheet(path)
    rows = list(sheet.rows())

    assert sheet.metadata().client_name.text() == "ACME HOLDINGS LIMITED"
    assert rows[0].customer_no.text() == "1001"
    assert rows[1].suspend.text() == "y"
    assert rows[2].customer_no.is_empty


def test_unsupported_file_type(tmp_path):
    path = tmp_path / "payments.pdf"
    path.write_bytes(b"%PDF-1.4")
    with pytest.raises(SheetReadError, match="Unsupported file type"):
        read_sheet(path)


def test_unreadable_excel(tmp_path):
    path = tmp_path / "payments.xlsx"
    path.write_bytes(b"not a workbook")
    with pytest.raises(SheetReadError):
        read_sheet(path)
