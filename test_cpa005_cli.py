import pytest
from typer.testing import CliRunner

import cpa005_cli as cli
from ach_records import LOGICAL_RECORD_LENGTH, detail_length

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *a, **k: None)
    monkeypatch.setattr(cli, "load_dotenv", lambda *a, **k: False)


@pytest.fixture
def sheet_path(tmp_path, scenario_records):
    path = tmp_path / "payments.csv"
    path.write_text("\n".join(",".join(str(v) for v in r) for r in scenario_records) + "\n")
    return path


def test_convert_credit_file(tmp_path, sheet_path):
    out = tmp_path / "out.txt"
    result = runner.invoke(cli.app, ["convert", str(sheet_path), str(out),
                                     "--mode", "PDS", "--file-date", "2024-03-01"])

    assert result.exit_code == 0, result.output
    assert "1 payments, total $100.00, 1 suspended" in result.output
    records = out.read_text().split("\n")
    assert [r[0] for r in records] == ["A", "C", "Z"]
    assert records[0][24:30] == "024061"
    assert [len(r) for r in records] == [LOGICAL_RECORD_LENGTH, detail_length(1), LOGICAL_RECORD_LENGTH]


def test_strict_fixed_width_output(tmp_path, sheet_path):
    out = tmp_path / "out.txt"
    result = runner.invoke(cli.app, ["convert", str(sheet_path), str(out), "--delimiter", "none"])

    assert result.exit_code == 0, result.output
    assert len(out.read_bytes()) == 2 * LOGICAL_RECORD_LENGTH + detail_length(1)


def test_unknown_mode(tmp_path, sheet_path):
    result = runner.invoke(cli.app, ["convert", str(sheet_path), str(tmp_path / "out.txt"),
                                     "--mode", "XYZ"])

    assert result.exit_code == 2
    assert not (tmp_path / "out.txt").exists()


def test_bad_delimiter(tmp_path, sheet_path):
    result = runner.invoke(cli.app, ["convert", str(sheet_path), str(tmp_path / "out.txt"),
                                     "--delimiter", "tab"])

    assert result.exit_code == 2


def test_conversion_error_exits_nonzero(tmp_path):
    path = tmp_path / "payments.csv"
    path.write_text("Client Name,ACME\nClient Number,\n")
    out = tmp_path / "out.txt"

    result = runner.invoke(cli.app, ["convert", str(path), str(out)])

    assert result.exit_code == 1
    assert "Missing Client Number" in result.output
    assert not out.exists()
