"""Shared fixtures: sample payment sheets and a clean CPA005_* environment."""

import pytest

METADATA = [
    ("Client Name", "ACME HOLDINGS LIMITED"),
    ("Client Number", "0123456789"),
    ("Processing Centre", "00320"),
    ("Currency Code", "CAD"),
    ("Payment Date", "2024/03/15"),
    ("Transaction Code", "450"),
]
HEADINGS = ["Customer No", "Customer Name", "Bank", "Branch", "Account", "Amount", "Suspend"]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep a developer's .env or shell settings out of the tests."""
    for name in ("CPA005_RECORD_DELIMITER", "CPA005_ON_INVALID_ROW",
                 "CPA005_APP_PASSWORD", "CPA005_LOG_LEVEL", "CPA005_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("ach_config.load_dotenv", lambda *a, **k: False)


@pytest.fixture
def make_records():
    """Return a builder for raw sheet rows: metadata, headings, then payments."""

    def build(payments, **metadata):
        rows = [[label, metadata.get(label.lower().replace(" ", "_"), value)]
                for label, value in METADATA]
        rows.append(list(HEADINGS))
        rows.extend(list(p) for p in payments)
        return rows

    return build


@pytest.fixture
def scenario_records(make_records):
    """One accepted row, one suspended row, then the end-of-data row."""
    return make_records([
        ["1001", "JANE DOE", "003", "00012", "1234567", "100.00", ""],
        ["1002", "JOHN ROE", "003", "00012", "7654321", "50.25", "y"],
        ["", "", "", "", "", 0, ""],
    ])
