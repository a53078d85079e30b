from datetime import date
from decimal import Decimal

import pytest

from ach_errors import FieldOverflow
from ach_records import (
    LOGICAL_RECORD_LENGTH,
    SEGMENT_LENGTH,
    Detail,
    Header,
    Payment,
    PaymentDirection,
    RecordKind,
    Trailer,
    detail_length,
    record_type_char,
)


def make_payment(**overrides):
    values = dict(
        transaction_code="450",
        amount=Decimal("100.00"),
        payment_date=date(2024, 3, 15),
        bank="3",
        branch="12",
        account_no="1234567",
        client_short_name="ACME HOLDINGS L",
        customer_name="JANE DOE",
        client_long_name="ACME HOLDINGS LIMITED",
        client_no="0123456789",
        customer_no="1001",
    )
    values.update(overrides)
    return Payment(**values)


def test_record_type_characters():
    assert record_type_char(RecordKind.HEADER) == "A"
    assert record_type_char(RecordKind.TRAILER) == "Z"
    assert record_type_char(RecordKind.DETAIL, PaymentDirection.DEBIT) == "D"
    assert record_type_char(RecordKind.DETAIL, PaymentDirection.CREDIT) == "C"
    with pytest.raises(ValueError):
        record_type_char(RecordKind.DETAIL)


def test_header_layout():
    header = Header(
        sequence=1,
        client_no="0123456789",
        file_no=1,
        file_date=date(2024, 3, 1),
        processing_centre="00320",
        currency_code="CAD",
    )
    record = header.render()

    assert len(record) == LOGICAL_RECORD_LENGTH
    assert record[:35] == "A000000001" "0123456789" "1   " "024061" "00320"
    assert record[35:55] == " " * 20
    assert record[55:58] == "CAD"
    assert record[58:].strip() == ""


def test_payment_segment_layout():
    segment = make_payment().render()

    assert len(segment) == SEGMENT_LENGTH
    assert segment[0:3] == "450"
    assert segment[3:13] == "0000010000"
    assert segment[13:19] == "024075"
    assert segment[19:28] == "000300012"
    assert segment[28:40] == "1234567     "
    assert segment[40:65] == "0" * 25
    assert segment[65:80] == "ACME HOLDINGS L"
    assert segment[80:110] == "JANE DOE".ljust(30)
    assert segment[110:140] == "ACME HOLDINGS LIMITED".ljust(30)
    assert segment[140:150] == "0123456789"
    assert segment[150:169] == "1001".ljust(19)
    assert segment[169:178] == "0" * 9
    assert segment[178:].strip() == ""


def test_payment_overflow_names_the_field():
    payment = make_payment(customer_name="X" * 31)
    with pytest.raises(FieldOverflow) as exc:
        payment.render()
    assert exc.value.field == "customer name"


@pytest.mark.parametrize("direction, tag", [
    (PaymentDirection.DEBIT, "D"),
    (PaymentDirection.CREDIT, "C"),
])
def test_detail_record(direction, tag):
    detail = Detail(direction=direction, sequence=2, client_no="0123456789",
                    file_no=2, payments=(make_payment(),))
    record = detail.render()

    assert len(record) == 1 + 9 + 10 + 4 + 240
    assert record[:24] == tag + "000000002" "0123456789" "2   "
    assert record[24:] == make_payment().render()


def test_detail_concatenates_its_segments():
    payments = tuple(make_payment(amount=Decimal(i)) for i in range(1, 7))
    detail = Detail(direction=PaymentDirection.CREDIT, sequence=5,
                    client_no="0123456789", file_no=5, payments=payments)

    assert len(detail.render()) == detail_length(6) == LOGICAL_RECORD_LENGTH
    assert detail.total_amount == Decimal(21)


def test_detail_segment_limits():
    with pytest.raises(ValueError):
        Detail(direction=PaymentDirection.DEBIT, sequence=2, client_no="0123456789",
               file_no=2, payments=())
    with pytest.raises(ValueError):
        Detail(direction=PaymentDirection.DEBIT, sequence=2, client_no="0123456789",
               file_no=2, payments=tuple(make_payment() for _ in range(7)))


def test_trailer_layout():
    trailer = Trailer(sequence=4, client_no="0123456789", file_no=4,
                      debit_amount=Decimal("150.25"), debit_count=2)
    record = trailer.render()

    assert len(record) == LOGICAL_RECORD_LENGTH
    assert record[:24] == "Z000000004" "0123456789" "4   "
    assert record[24:38] == "00000000015025"
    assert record[38:46] == "00000002"
    assert record[46:68] == "0" * 22
    assert record[68:] == "0" * 1396
